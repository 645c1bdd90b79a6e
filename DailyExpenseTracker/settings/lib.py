"""Settings library for the backend client and user preferences.

Provides:
    - Schema validation and enforcement for settings.json structure.
    - Loading, saving, reverting, and managing application settings.
    - Environment overrides for the service URL and public API key.
    - Application paths, including the durable session file.
"""

import json
import logging
import os
import pathlib
import re
import shutil
from typing import Dict, Any, Optional, List

from PySide6 import QtCore, QtWidgets

from ..status import status

app_name: str = 'DailyExpenseTracker'

URL_ENV_KEY: str = 'SUPABASE_URL'
KEY_ENV_KEY: str = 'SUPABASE_ANON_KEY'

EXPENSES_TABLE: str = 'expenses'
SESSION_FILE_NAME: str = 'session.json'

THEMES: List[str] = ['light', 'dark']

CLIENT_KEYS: List[str] = ['url', 'key']

METADATA_KEYS: List[str] = [
    'theme',
    'owner_only',
]

SETTINGS_SCHEMA: Dict[str, Any] = {
    'client': {
        'type': dict,
        'required': True,
        'required_keys': CLIENT_KEYS,
        'item_schema': {
            'url': {'type': str, 'required': True},
            'key': {'type': str, 'required': True},
        }
    },
    'metadata': {
        'type': dict,
        'required': True,
        'required_keys': METADATA_KEYS,
        'item_schema': {
            'theme': {'type': str, 'required': True, 'allowed_values': THEMES},
            'owner_only': {'type': bool, 'required': True},
        }
    },
}


def is_valid_url(value: str) -> bool:
    """Check if a string looks like an http(s) service URL.

    Args:
        value (str): URL to validate.

    Returns:
        bool: True if value starts with http:// or https:// followed by a host.
    """
    return bool(re.fullmatch(r'https?://[^\s/?#]+[^\s]*', value or ''))


def _validate_section(section_name: str, section: Dict[str, Any], specs: Dict[str, Any]) -> None:
    """Validate a single section against its schema entry.

    Args:
        section_name: Name of the section, used in error messages.
        section: The section data.
        specs: The schema entry of the section.

    Raises:
        TypeError: If the section or one of its values has the wrong type.
        ValueError: If required keys are missing or a value is not allowed.
    """
    logging.debug(f'Validating "{section_name}" section.')
    if not isinstance(section, specs['type']):
        msg: str = f'{section_name} must be {specs["type"]}, got {type(section)}.'
        logging.error(msg)
        raise TypeError(msg)

    missing = [k for k in specs.get('required_keys', []) if k not in section]
    if missing:
        msg = f'{section_name} is missing keys: {missing}.'
        logging.error(msg)
        raise ValueError(msg)

    for key, item_specs in specs.get('item_schema', {}).items():
        if key not in section:
            continue
        value = section[key]
        if not isinstance(value, item_specs['type']):
            msg = f'{section_name}.{key} must be {item_specs["type"]}, got {type(value)}.'
            logging.error(msg)
            raise TypeError(msg)
        allowed = item_specs.get('allowed_values')
        if allowed and value not in allowed:
            msg = f'{section_name}.{key} must be one of {allowed}, got "{value}".'
            logging.error(msg)
            raise ValueError(msg)


class ConfigPaths:
    """Manage application file paths and ensure default templates and directories exist.

    Paths for the bundled settings template, the user config directory and the
    auth directory holding the durable session file.
    """

    def __init__(self) -> None:
        # Set the application name and organization
        QtWidgets.QApplication.setApplicationName(app_name)
        QtWidgets.QApplication.setOrganizationName('')
        logging.debug(f'Setting application name: {app_name}')

        # Get the app data directory
        p = QtCore.QStandardPaths.writableLocation(QtCore.QStandardPaths.AppDataLocation)
        app_data_dir = pathlib.Path(p)
        logging.debug(f'Using app data directory: {app_data_dir}')

        self.template_dir: pathlib.Path = pathlib.Path(__file__).parent.parent / 'config'
        self.settings_template: pathlib.Path = self.template_dir / 'settings.json.template'

        self.config_dir: pathlib.Path = app_data_dir / 'config'
        self.auth_dir: pathlib.Path = self.config_dir / 'auth'

        # Config files
        self.settings_path: pathlib.Path = self.config_dir / 'settings.json'
        self.session_path: pathlib.Path = self.auth_dir / SESSION_FILE_NAME

        self._verify_and_prepare()

    def _verify_and_prepare(self) -> None:
        """Verify the template exists and prepare configuration directories and files.

        Raises:
            FileNotFoundError: If the template directory or file is missing.
        """
        logging.debug(f'Verifying required directories and templates in {self.template_dir}')
        if not self.template_dir.exists():
            msg: str = f'Missing template directory: {self.template_dir}'
            logging.error(msg)
            raise FileNotFoundError(msg)
        if not self.settings_template.exists():
            msg = f'Missing settings template: {self.settings_template}'
            logging.error(msg)
            raise FileNotFoundError(msg)

        if not self.config_dir.exists():
            logging.debug(f'Creating config directory: {self.config_dir}')
            self.config_dir.mkdir(parents=True, exist_ok=True)

        if not self.auth_dir.exists():
            logging.debug(f'Creating auth directory: {self.auth_dir}')
            self.auth_dir.mkdir(parents=True, exist_ok=True)

        # Ensure a valid settings file exists even if we haven't yet set it up
        if not self.settings_path.exists():
            logging.debug(f'Copying default settings from template to {self.settings_path}')
            shutil.copy(self.settings_template, self.settings_path)


class SettingsAPI(ConfigPaths):
    """
    Provides an interface to get/set/revert/save settings.json sections, and resolves
    the backend client configuration from the environment and the settings file.
    """

    def __init__(self, settings_path: Optional[str] = None) -> None:
        """Initialize SettingsAPI and load the settings data.

        Args:
            settings_path: Optional path to a custom settings.json file.
        """
        super().__init__()

        self.settings_path: pathlib.Path = pathlib.Path(settings_path) if settings_path else self.settings_path

        self.settings_data: Dict[str, Any] = {}
        for k in SETTINGS_SCHEMA.keys():
            self.settings_data[k] = {}

        self.init_data()

    def __getitem__(self, key: str) -> Any:
        """Retrieve a metadata value using dictionary-style access.

        Raises:
            KeyError: If key is not in METADATA_KEYS.
            RuntimeError: If metadata section is missing from settings_data.
        """
        if key not in METADATA_KEYS:
            raise KeyError(f'Invalid metadata key: {key}, must be one of {METADATA_KEYS}')

        if 'metadata' not in self.settings_data:
            raise RuntimeError('Malformed settings data, missing "metadata" section.')

        _type = SETTINGS_SCHEMA['metadata']['item_schema'][key]['type']
        v = self.settings_data['metadata'].get(key)

        if not isinstance(v, _type):
            logging.error(f'Metadata key "{key}" is not of type {_type}, got {type(v)}.')
            return None

        return v

    def __setitem__(self, key: str, value: Any) -> None:
        """Assign a metadata value using dictionary-style access and persist it.

        Raises:
            KeyError: If key is not in METADATA_KEYS.
            RuntimeError: If metadata section is missing.
        """
        if key not in METADATA_KEYS:
            raise KeyError(f'Invalid metadata key: {key}, must be one of {METADATA_KEYS}')

        if 'metadata' not in self.settings_data:
            raise RuntimeError('Malformed settings data, missing "metadata" section.')

        _type = SETTINGS_SCHEMA['metadata']['item_schema'][key]['type']
        if not isinstance(value, _type):
            logging.warning(f'Metadata key "{key}" is not of type {_type}, got {type(value)}.')
            value = _type(value)

        allowed = SETTINGS_SCHEMA['metadata']['item_schema'][key].get('allowed_values')
        if allowed and value not in allowed:
            raise ValueError(f'Metadata key "{key}" must be one of {allowed}, got "{value}".')

        self.settings_data['metadata'][key] = value
        self.save_section('metadata')

        from ..ui.actions import signals
        signals.metadataChanged.emit(key, value)

    @QtCore.Slot()
    def init_data(self) -> None:
        """Reload settings data, emitting UI update signals."""
        self.load_settings()

        from ..ui.actions import signals
        for section in SETTINGS_SCHEMA.keys():
            signals.configSectionChanged.emit(section)

        for k, v in self.settings_data.get('metadata', {}).items():
            signals.metadataChanged.emit(k, v)

    def load_settings(self) -> Dict[str, Any]:
        """Load settings.json from disk and validate against schema.

        Returns:
            The loaded settings data dictionary.

        Raises:
            status.ClientConfigNotFoundException: If settings.json file is missing.
            status.ClientConfigInvalidException: If JSON parsing or validation fails.
        """
        logging.debug(f'Loading settings from "{self.settings_path}"')
        if not self.settings_path.exists():
            raise status.ClientConfigNotFoundException(f'Settings file not found: {self.settings_path}')

        try:
            with self.settings_path.open('r', encoding='utf-8') as f:
                data: Dict[str, Any] = json.load(f)
            self.validate_settings_data(data)
        except (ValueError, TypeError) as ex:
            raise status.ClientConfigInvalidException(str(ex)) from ex

        self.settings_data = data
        return self.settings_data

    def validate_settings_data(self, data: Dict[str, Any] = None) -> None:
        """Validate settings data against the defined SETTINGS_SCHEMA.

        Args:
            data (dict, optional): Settings data to validate. Defaults to self.settings_data.

        Raises:
            ValueError: If data is empty or a required section is missing.
            TypeError: If a section has the wrong type.
        """
        if data is None:
            data = self.settings_data
        if not isinstance(data, dict) or not data:
            raise ValueError('Settings data is empty.')

        logging.debug('Validating settings data against schema.')
        for field, specs in SETTINGS_SCHEMA.items():
            if specs.get('required') and field not in data:
                raise ValueError(f'Missing required field: {field}')
            if field not in data:
                continue
            _validate_section(field, data[field], specs)

        logging.debug('Settings data is valid.')

    def client_config(self) -> Dict[str, str]:
        """Resolve the backend client configuration.

        Environment variables take precedence over the values stored in the
        "client" section.

        Returns:
            dict: {'url': str, 'key': str}

        Raises:
            status.ClientConfigNotFoundException: If the URL or key is not set anywhere.
            status.ClientConfigInvalidException: If the URL is malformed.
        """
        config: Dict[str, str] = self.get_section('client')

        env_url = os.environ.get(URL_ENV_KEY, '').strip()
        env_key = os.environ.get(KEY_ENV_KEY, '').strip()
        if env_url:
            logging.debug(f'Using service URL from ${URL_ENV_KEY}.')
            config['url'] = env_url
        if env_key:
            logging.debug(f'Using API key from ${KEY_ENV_KEY}.')
            config['key'] = env_key

        self.validate_client_config(config)
        return config

    @staticmethod
    def validate_client_config(config: Dict[str, Any]) -> None:
        """Validate that the client configuration has a usable URL and key.

        Raises:
            status.ClientConfigNotFoundException: If the URL or key is empty.
            status.ClientConfigInvalidException: If the URL is malformed.
        """
        missing: List[str] = [k for k in CLIENT_KEYS if not config.get(k)]
        if missing:
            raise status.ClientConfigNotFoundException(f'Missing client values: {missing}.')

        if not is_valid_url(config['url']):
            raise status.ClientConfigInvalidException(f'"{config["url"]}" is not a valid service URL.')

    def get_section(self, section_name: str) -> Dict[str, Any]:
        """Retrieve a copy of configuration data for a section.

        Raises:
            KeyError: If section_name is not in settings_data.
        """
        return self.settings_data[section_name].copy()

    def set_section(self, section_name: str, new_data: Dict[str, Any]) -> None:
        """Replace and persist a configuration section.

        Args:
            section_name: Section to update.
            new_data: New data dict for the section.

        Raises:
            ValueError: If section_name is unrecognized or the data does not validate.
            TypeError: If new_data has the wrong types.
        """
        if section_name not in SETTINGS_SCHEMA:
            msg: str = f'Unknown section_name for set: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        _validate_section(section_name, new_data, SETTINGS_SCHEMA[section_name])

        self.settings_data[section_name] = dict(new_data)
        self.save_section(section_name)

        from ..ui.actions import signals
        signals.configSectionChanged.emit(section_name)
        if section_name == 'metadata':
            for k, v in new_data.items():
                signals.metadataChanged.emit(k, v)

    def revert_section(self, section_name: str) -> None:
        """Revert a configuration section to its template default and save.

        Raises:
            ValueError: If section_name is invalid or not present in the template.
        """
        if section_name not in SETTINGS_SCHEMA:
            msg: str = f'Unknown section_name for revert: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        with self.settings_template.open('r', encoding='utf-8') as f:
            template_data: Dict[str, Any] = json.load(f)

        if section_name not in template_data:
            msg = f'No template-based revert logic for section "{section_name}".'
            logging.error(msg)
            raise ValueError(msg)

        self.set_section(section_name, template_data[section_name])

    def save_section(self, section_name: str) -> None:
        """Persist a single configuration section to settings.json.

        Raises:
            ValueError: If section_name is not recognized.
        """
        if section_name not in SETTINGS_SCHEMA:
            msg: str = f'Unknown section_name for save: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        logging.debug(f'Saving section "{section_name}" to "{self.settings_path}"')
        with self.settings_path.open('r', encoding='utf-8') as f:
            original_data: Dict[str, Any] = json.load(f)

        new_data: Dict[str, Any] = original_data.copy()
        new_data[section_name] = self.settings_data[section_name]

        with self.settings_path.open('w', encoding='utf-8') as f:
            json.dump(new_data, f, indent=4, ensure_ascii=False)


settings: SettingsAPI = SettingsAPI()
