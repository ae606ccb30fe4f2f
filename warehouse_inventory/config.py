import os
import configparser
from pathlib import Path

from warehouse_inventory.exceptions import ConfigError

DEFAULT_DATABASE_URL = 'sqlite:///warehouse.db'
DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

class Config:
    """Configuration manager for the Warehouse Inventory system."""

    _instance = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the configuration if not already initialized."""
        if self._initialized:
            return

        self._config_dir = Path(os.getenv('WAREHOUSE_INVENTORY_CONFIG_DIR', 'config'))
        self._config_path = self._config_dir / 'settings.ini'
        self._config = configparser.ConfigParser(interpolation=None)

        if self._config_path.exists():
            self._config.read(self._config_path)
        else:
            self._load_defaults()

        self._initialized = True

    def _load_defaults(self):
        """Populate the default configuration without touching the filesystem."""
        self._config['DATABASE'] = {
            'url': DEFAULT_DATABASE_URL,
            'echo': 'False',
            'pool_size': '10',
            'max_overflow': '20',
            'pool_timeout': '30',
            'pool_recycle': '1800'
        }

        self._config['LOGGING'] = {
            'level': 'INFO',
            'format': DEFAULT_LOG_FORMAT,
            'directory': 'logs',
            'max_size_mb': '10',
            'backup_count': '5',
            'console_output': 'True',
            'file_output': 'False'
        }

        self._config['INVENTORY'] = {
            'enforce_zone_warehouse': 'False',
            'atomic_transfers': 'True',
            'seed_on_init': 'True'
        }

    def save(self):
        """Write the current configuration to settings.ini."""
        try:
            if not self._config_dir.exists():
                self._config_dir.mkdir(parents=True)
            with open(self._config_path, 'w') as configfile:
                self._config.write(configfile)
        except OSError as e:
            raise ConfigError(f"Could not write configuration to {self._config_path}: {e}")

    def _lookup(self, read, section, key, default):
        try:
            return read(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return default

    def get(self, section, key, default=None):
        """Raw string value, or default when the option is missing."""
        return self._lookup(self._config.get, section, key, default)

    def get_int(self, section, key, default=None):
        return self._lookup(self._config.getint, section, key, default)

    def get_float(self, section, key, default=None):
        return self._lookup(self._config.getfloat, section, key, default)

    def get_boolean(self, section, key, default=None):
        return self._lookup(self._config.getboolean, section, key, default)

    def set(self, section, key, value):
        """Set configuration value in memory. Call save() to persist it."""
        if not self._config.has_section(section):
            self._config.add_section(section)

        self._config.set(section, key, str(value))

    def get_db_url(self):
        """Get the SQLAlchemy database URL.

        DATABASE_URL in the environment wins over settings.ini.
        """
        return os.getenv('DATABASE_URL') or self.get('DATABASE', 'url', DEFAULT_DATABASE_URL)

    @property
    def database_config(self):
        """Get database engine configuration."""
        return {
            'url': self.get_db_url(),
            'echo': self.get_boolean('DATABASE', 'echo', False),
            'pool_size': self.get_int('DATABASE', 'pool_size', 10),
            'max_overflow': self.get_int('DATABASE', 'max_overflow', 20),
            'pool_timeout': self.get_int('DATABASE', 'pool_timeout', 30),
            'pool_recycle': self.get_int('DATABASE', 'pool_recycle', 1800)
        }

    @property
    def log_config(self):
        """Get logging configuration."""
        return {
            'level': self.get('LOGGING', 'level', 'INFO'),
            'format': self.get('LOGGING', 'format', DEFAULT_LOG_FORMAT),
            'directory': self.get('LOGGING', 'directory', 'logs'),
            'max_size_mb': self.get_int('LOGGING', 'max_size_mb', 10),
            'backup_count': self.get_int('LOGGING', 'backup_count', 5),
            'console_output': self.get_boolean('LOGGING', 'console_output', True),
            'file_output': self.get_boolean('LOGGING', 'file_output', False)
        }

    @property
    def inventory_config(self):
        """Get inventory engine rules."""
        return {
            'enforce_zone_warehouse': self.get_boolean('INVENTORY', 'enforce_zone_warehouse', False),
            'atomic_transfers': self.get_boolean('INVENTORY', 'atomic_transfers', True),
            'seed_on_init': self.get_boolean('INVENTORY', 'seed_on_init', True)
        }

# Global config instance
config = Config()
