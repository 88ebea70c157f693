"""
Configuration management for the new-tab dashboard
Handles loading and saving settings, preferences and service definitions
"""

import json
import sys
from pathlib import Path
from typing import Dict, Any, List, Optional
from zoneinfo import ZoneInfo

from .models import ServiceDefinition


def _default_history_db_path() -> str:
    """Location of Chrome's default-profile History database on this platform"""
    home = Path.home()
    if sys.platform == "darwin":
        path = home / "Library" / "Application Support" / "Google" / "Chrome" / "Default" / "History"
    elif sys.platform.startswith("win"):
        path = home / "AppData" / "Local" / "Google" / "Chrome" / "User Data" / "Default" / "History"
    else:
        path = home / ".config" / "google-chrome" / "Default" / "History"
    return str(path)


class Config:
    """Configuration manager for the dashboard"""

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize configuration manager

        Args:
            config_dir: Path to configuration directory (defaults to ./config)
        """
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.settings_file = self.config_dir / "settings.json"
        self.preferences_file = self.config_dir / "preferences.json"
        self.services_file = self.config_dir / "services.json"

        # Load configurations
        self.settings = self._load_json(self.settings_file, self._default_settings())
        self.preferences = self._load_json(self.preferences_file, self._default_preferences())
        self.services = self._load_json(self.services_file, self._default_services())

    def _load_json(self, file_path: Path, default: Any) -> Any:
        """Load JSON file or return default if file doesn't exist"""
        if file_path.exists():
            with open(file_path, 'r') as f:
                return json.load(f)
        else:
            # Create file with defaults
            self._save_json(file_path, default)
            return default

    def _save_json(self, file_path: Path, data: Any) -> None:
        """Save data to JSON file"""
        with open(file_path, 'w') as f:
            json.dump(data, f, indent=2)

    def _default_settings(self) -> Dict[str, Any]:
        """Default system settings"""
        return {
            "credentials_dir": "config/google_credentials",
            "history_db_path": _default_history_db_path(),
            "timezone": "Asia/Tokyo",
            "weather_latitude": 35.1815,
            "weather_longitude": 136.9066,
        }

    def _default_preferences(self) -> Dict[str, Any]:
        """Default user preferences"""
        return {
            "history_window_days": 7,
            "history_max_results": 1000,
            "per_service_limit": 30,
            "title_max_length": 35,
            "assume_ordered_by_recency": True,
            "excluded_path_markers": ["/login", "/auth", "/settings", "/recents"],
            "exclude_root_paths": True,
            "fetch_timeout_seconds": 10,
            "default_calendar_color": "#4285f4",
            "calendar_refresh_seconds": 300,
            "history_refresh_seconds": 60,
            "weather_refresh_seconds": 1800,
        }

    def _default_services(self) -> List[Dict[str, Any]]:
        """Default AI chat services shown in the history panels"""
        return [
            {
                "id": "chatgpt",
                "name": "ChatGPT",
                "domains": ["chatgpt.com", "chat.openai.com"],
                "title_suffix_pattern": r"\s*-\s*ChatGPT$",
                "container_id": "chatgptHistory",
            },
            {
                "id": "claude",
                "name": "Claude",
                "domains": ["claude.ai"],
                "title_suffix_pattern": r"\s*-?\s*Claude$",
                "container_id": "claudeHistory",
            },
            {
                "id": "gemini",
                "name": "Gemini",
                "domains": ["gemini.google.com"],
                "title_suffix_pattern": r"\s+-\s+Gemini$",
                "container_id": "geminiHistory",
            },
        ]

    def get(self, key: str, section: str = "settings", default: Any = None) -> Any:
        """
        Get configuration value

        Args:
            key: Configuration key
            section: Configuration section ('settings', 'preferences')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        section_map = {
            "settings": self.settings,
            "preferences": self.preferences,
        }

        return section_map.get(section, {}).get(key, default)

    def set(self, key: str, value: Any, section: str = "settings") -> None:
        """
        Set configuration value and save to disk

        Args:
            key: Configuration key
            value: Value to set
            section: Configuration section ('settings', 'preferences')
        """
        section_map = {
            "settings": (self.settings, self.settings_file),
            "preferences": (self.preferences, self.preferences_file),
        }

        if section in section_map:
            config_dict, file_path = section_map[section]
            config_dict[key] = value
            self._save_json(file_path, config_dict)

    def get_services(self) -> List[ServiceDefinition]:
        """Service definitions in configured order"""
        return [ServiceDefinition.from_dict(entry) for entry in self.services]

    def get_timezone(self) -> ZoneInfo:
        """Viewer's local timezone used for day boundaries"""
        return ZoneInfo(self.get("timezone", "settings", "Asia/Tokyo"))

    def get_credentials_dir(self) -> Path:
        """Get full path to the Google credentials directory"""
        path = Path(self.settings["credentials_dir"])
        if path.is_absolute():
            return path
        return self.config_dir.parent / path

    def get_history_db_path(self) -> Path:
        """Get full path to the browser History database"""
        return Path(self.settings["history_db_path"]).expanduser()
