"""
Callsign Directory for the net log.

Looks up station details (name, location) for a callsign so the operator
can fill in a check-in quickly. Lookups are best-effort.
"""

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from utils.paths import get_real_user_home

logger = logging.getLogger(__name__)

FCC_LICENSE_API = "https://data.fcc.gov/api/license-view/basicSearch/getLicenses"
USER_AGENT = "NetLog/1.0 (ICS-309 Net Control)"

# FCC operator class codes
LICENSE_CLASS_MAP = {
    'E': 'Amateur Extra',
    'A': 'Advanced',
    'G': 'General',
    'P': 'Technician Plus',
    'T': 'Technician',
    'N': 'Novice',
}


class CallsignLookupError(Exception):
    """A directory could not be queried (network, parse, ...)."""


@dataclass
class CallsignInfo:
    """Amateur radio callsign information"""

    callsign: str
    name: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = "US"
    grid_square: str = ""
    license_class: str = ""
    grant_date: str = ""
    expiration_date: str = ""
    frn: str = ""  # FCC Registration Number

    @property
    def location(self) -> str:
        """City, ST style location for a check-in"""
        return ", ".join(part for part in (self.city, self.state) if part)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'callsign': self.callsign,
            'name': self.name,
            'address': self.address,
            'city': self.city,
            'state': self.state,
            'zip_code': self.zip_code,
            'country': self.country,
            'grid_square': self.grid_square,
            'license_class': self.license_class,
            'grant_date': self.grant_date,
            'expiration_date': self.expiration_date,
            'frn': self.frn,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CallsignInfo':
        """Create from dictionary"""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


class CallsignDirectory(ABC):
    """Lookup boundary. Callers pass an already-normalized callsign."""

    @abstractmethod
    def lookup(self, callsign: str) -> Optional[CallsignInfo]:
        """
        Return the record for ``callsign`` or None if it is unknown.

        May raise CallsignLookupError when the directory is unreachable.
        """


class StaticCallsignDirectory(CallsignDirectory):
    """In-memory directory (offline rosters, tests)"""

    def __init__(self, records: Optional[Dict[str, CallsignInfo]] = None):
        self._records: Dict[str, CallsignInfo] = {}
        for info in (records or {}).values():
            self.add(info)

    def add(self, info: CallsignInfo) -> None:
        self._records[info.callsign.upper()] = info

    def lookup(self, callsign: str) -> Optional[CallsignInfo]:
        return self._records.get(callsign.upper())


class FccCallsignDirectory(CallsignDirectory):
    """
    FCC ULS (License View API) directory with a local JSON cache.

    Only positive results are cached.
    """

    def __init__(self, cache_dir: Optional[Path] = None, timeout: float = 10.0,
                 use_cache: bool = True):
        self.cache_dir = cache_dir or get_real_user_home() / '.config' / 'netlog'
        self.cache_file = self.cache_dir / 'callsign_cache.json'
        self.timeout = timeout
        self.use_cache = use_cache
        self._cache: Dict[str, CallsignInfo] = {}
        self._load_cache()

    def _load_cache(self) -> None:
        """Load callsign cache from disk"""
        if not self.cache_file.exists():
            return
        try:
            with open(self.cache_file, 'r') as f:
                data = json.load(f)
            self._cache = {
                call: CallsignInfo.from_dict(info)
                for call, info in data.get('cache', {}).items()
            }
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load callsign cache: {e}")

    def _save_cache(self) -> None:
        """Save callsign cache to disk"""
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            data = {'cache': {call: info.to_dict() for call, info in self._cache.items()}}
            with open(self.cache_file, 'w') as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.warning(f"Failed to save callsign cache: {e}")

    def clear_cache(self) -> None:
        self._cache.clear()
        self._save_cache()

    @property
    def cached_callsigns(self):
        return sorted(self._cache)

    def lookup(self, callsign: str) -> Optional[CallsignInfo]:
        callsign = callsign.upper().strip()

        # Check cache first
        if self.use_cache and callsign in self._cache:
            logger.debug(f"Callsign {callsign} found in cache")
            return self._cache[callsign]

        info = self._lookup_fcc_uls(callsign)
        if info:
            self._cache[callsign] = info
            self._save_cache()
        return info

    def _fetch(self, callsign: str) -> Dict[str, Any]:
        params = urllib.parse.urlencode({'searchValue': callsign, 'format': 'json'})
        request = urllib.request.Request(
            f"{FCC_LICENSE_API}?{params}",
            headers={'User-Agent': USER_AGENT}
        )
        with urllib.request.urlopen(request, timeout=self.timeout) as response:
            return json.loads(response.read().decode('utf-8'))

    def _lookup_fcc_uls(self, callsign: str) -> Optional[CallsignInfo]:
        logger.info(f"FCC ULS lookup for {callsign}")
        try:
            data = self._fetch(callsign)
        except urllib.error.HTTPError as e:
            raise CallsignLookupError(f"FCC ULS HTTP error for {callsign}: {e.code}") from e
        except urllib.error.URLError as e:
            raise CallsignLookupError(f"FCC ULS network error for {callsign}: {e.reason}") from e
        except ValueError as e:
            raise CallsignLookupError(f"FCC ULS parse error for {callsign}: {e}") from e

        return self.parse_fcc_response(callsign, data)

    @staticmethod
    def parse_fcc_response(callsign: str, data: Dict[str, Any]) -> Optional[CallsignInfo]:
        """
        Build a CallsignInfo from a License View API response.

        Args:
            callsign: The callsign that was searched
            data: Decoded JSON response

        Returns:
            CallsignInfo, or None when no license matched
        """
        licenses = (data.get('Licenses') or {}).get('License', [])
        if not licenses:
            logger.info(f"No FCC license found for {callsign}")
            return None

        # Single result comes back as a dict, not a list
        if isinstance(licenses, dict):
            licenses = [licenses]

        # serviceCode 'HA' = Amateur
        license_rec = next((lic for lic in licenses if lic.get('serviceCode') == 'HA'),
                           licenses[0])

        op_class = license_rec.get('operatorClass', '')
        grant_date = license_rec.get('grantDate', '')
        expiration_date = license_rec.get('expiredDate', '')

        info = CallsignInfo(
            callsign=callsign.upper(),
            name=license_rec.get('licName', ''),
            address=license_rec.get('addressLine1', ''),
            city=license_rec.get('addressCity', ''),
            state=license_rec.get('addressState', ''),
            zip_code=license_rec.get('addressZIP', ''),
            country='US',
            license_class=LICENSE_CLASS_MAP.get(op_class, license_rec.get('categoryDesc', '')),
            grant_date=grant_date[:10] if grant_date else '',
            expiration_date=expiration_date[:10] if expiration_date else '',
            frn=license_rec.get('frn', ''),
        )

        logger.info(f"FCC ULS found: {info.callsign} - {info.name} ({info.license_class})")
        return info
