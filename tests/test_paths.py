"""
Tests for path utilities.

Run: python3 -m pytest tests/test_paths.py -v
"""

import os
import sys
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from utils.paths import NetLogPaths, get_real_user_home


class TestGetRealUserHome:
    """Tests for get_real_user_home function."""

    def test_with_sudo_user(self):
        """Test returns real user home when running with sudo."""
        with patch.dict(os.environ, {'SUDO_USER': 'testuser'}):
            assert get_real_user_home() == Path('/home/testuser')

    def test_sudo_user_root(self):
        """Test handles SUDO_USER=root correctly."""
        with patch.dict(os.environ, {'SUDO_USER': 'root'}):
            with patch('pathlib.Path.home', return_value=Path('/root')):
                assert get_real_user_home() == Path('/root')

    def test_empty_sudo_user(self):
        """Test handles empty SUDO_USER."""
        with patch.dict(os.environ, {'SUDO_USER': ''}):
            with patch('pathlib.Path.home', return_value=Path('/home/default')):
                assert get_real_user_home() == Path('/home/default')


class TestNetLogPaths:
    """Tests for NetLogPaths."""

    def test_locations(self):
        with patch('utils.paths.get_real_user_home', return_value=Path('/home/op')):
            assert NetLogPaths.get_config_file() == Path('/home/op/.config/netlog/netlog.json')
            assert NetLogPaths.get_database_file() == \
                Path('/home/op/.local/share/netlog/netlog.db')

    def test_ensure_user_dirs(self, tmp_path):
        with patch('utils.paths.get_real_user_home', return_value=tmp_path):
            NetLogPaths.ensure_user_dirs()
        assert (tmp_path / '.config' / 'netlog').is_dir()
        assert (tmp_path / '.local' / 'share' / 'netlog').is_dir()
