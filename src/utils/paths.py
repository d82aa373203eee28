"""
NetLog Path Constants

Always use get_real_user_home() instead of Path.home() for files in the
user's home directory. When the tool is run with sudo, Path.home()
returns /root, but the log belongs to the real operator.
"""

from pathlib import Path
import os


def get_real_user_home() -> Path:
    """
    Get the real user's home directory, even when running as root via sudo.

    Returns:
        Path to the real user's home directory
    """
    sudo_user = os.environ.get('SUDO_USER')
    if sudo_user and sudo_user != 'root':
        return Path(f'/home/{sudo_user}')

    return Path.home()


class NetLogPaths:
    """Paths used by the net log"""

    @classmethod
    def get_config_dir(cls) -> Path:
        return get_real_user_home() / '.config' / 'netlog'

    @classmethod
    def get_config_file(cls) -> Path:
        return cls.get_config_dir() / 'netlog.json'

    @classmethod
    def get_data_dir(cls) -> Path:
        return get_real_user_home() / '.local' / 'share' / 'netlog'

    @classmethod
    def get_database_file(cls) -> Path:
        """Default SQLite database for sessions and log entries"""
        return cls.get_data_dir() / 'netlog.db'

    @classmethod
    def ensure_user_dirs(cls) -> None:
        """Create user directories if they don't exist"""
        cls.get_config_dir().mkdir(parents=True, exist_ok=True)
        cls.get_data_dir().mkdir(parents=True, exist_ok=True)
