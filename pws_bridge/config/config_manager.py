"""Configuration manager for the PWSWeather bridge."""

import os
import yaml
from typing import Dict, Any, Optional


DEFAULT_SUBMIT_INTERVAL = 5


class ConfigError(ValueError):
    """Raised when required configuration is missing or invalid."""
    pass


class ConfigManager:
    """Loads the YAML configuration and applies environment overrides."""
    
    def __init__(self, config_path: Optional[str] = None) -> None:
        """Initialize configuration manager.
        
        Args:
            config_path: Path to configuration file. If None, looks at CONFIG_PATH
                        and then config.yaml in the current directory.
        """
        self._config_path = config_path or self._find_config_file()
        self._config: Dict[str, Any] = {}
        self._load_config()
        
    def _find_config_file(self) -> str:
        """Find configuration file in standard locations."""
        possible_paths = [
            os.environ.get('CONFIG_PATH'),
            'config.yaml',
        ]
        
        for path in possible_paths:
            if path and os.path.exists(path):
                return os.path.abspath(path)
                
        raise FileNotFoundError(
            "Configuration file not found. Please create config.yaml or set CONFIG_PATH environment variable."
        )
    
    def _load_config(self) -> None:
        """Load configuration from YAML file and environment variables."""
        if not os.path.exists(self._config_path):
            raise FileNotFoundError(f"Configuration file not found: {self._config_path}")
        
        try:
            with open(self._config_path, 'r') as file:
                self._config = yaml.safe_load(file) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse configuration: {e}") from e
        
        self._apply_env_overrides()
        self._validate_config()
    
    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        env_mappings = {
            'PWS_STATION_ID': ['pwsweather', 'station_id'],
            'PWS_EMAIL': ['pwsweather', 'email'],
            'PWS_PASSWORD': ['pwsweather', 'password'],
            'PWS_SUBMIT_INTERVAL': ['pwsweather', 'submit_interval'],
            'SIGNALK_URL': ['signalk', 'url'],
            'LOG_LEVEL': ['logging', 'level'],
        }
        
        for env_var, config_path in env_mappings.items():
            value = os.environ.get(env_var)
            if value:
                self._set_nested_value(config_path, value)
    
    def _set_nested_value(self, path: list, value: str) -> None:
        """Set nested configuration value."""
        current = self._config
        for key in path[:-1]:
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = current[key]
        current[path[-1]] = value
    
    def _validate_config(self) -> None:
        """Validate required configuration sections.

        Credentials are checked when the plugin starts, not here.
        """
        required_sections = ['pwsweather', 'signalk', 'logging']
        
        for section in required_sections:
            if not isinstance(self._config.get(section), dict):
                raise ConfigError(f"Missing required configuration section: {section}")
        
        if not self._config['pwsweather'].get('station_id'):
            raise ConfigError("PWSWeather station_id must be set in config or PWS_STATION_ID environment variable")
        
        interval = self._config['pwsweather'].get('submit_interval')
        if interval is None:
            return
        try:
            interval = float(interval)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"submit_interval must be a number, got {interval!r}") from e
        if interval <= 0:
            raise ConfigError(f"submit_interval must be positive, got {interval}")
    
    def get(self, path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation.
        
        Args:
            path: Configuration path using dot notation (e.g., 'signalk.url')
            default: Default value if path not found
            
        Returns:
            Configuration value or default
        """
        keys = path.split('.')
        current = self._config
        
        try:
            for key in keys:
                current = current[key]
            return current
        except (KeyError, TypeError):
            return default
    
    def get_pwsweather_config(self) -> Dict[str, Any]:
        """Get PWSWeather account configuration with defaults applied."""
        config = self._config['pwsweather'].copy()
        interval = config.get('submit_interval')
        config['submit_interval'] = float(interval) if interval is not None else DEFAULT_SUBMIT_INTERVAL
        return config
    
    def get_signalk_config(self) -> Dict[str, Any]:
        """Get Signal K server configuration."""
        return self._config['signalk'].copy()
    
    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return self._config['logging'].copy()
    
    @property
    def config_path(self) -> str:
        """Get path to configuration file."""
        return self._config_path
