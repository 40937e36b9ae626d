"""Configuration loading and JSON preprocessing utilities."""

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path

from pkgroot.data_loader import settings_from_dict, settings_to_dict
from pkgroot.errors import ConfigError, format_field_error
from pkgroot.installer.models import InstallationSettings
from pkgroot.paths import get_default_install_root, get_default_packages_dir

CONFIG_SECTIONS = ("installer", "installation_settings")


@dataclass
class InstallerConfig:
    """Tunables for one installer instance.

    Every value here is passed explicitly to the installer and the catalog;
    nothing is read from process-wide state.
    """
    install_root: Path = field(default_factory=get_default_install_root)
    packages_dir: Path = field(default_factory=get_default_packages_dir)
    configuration_filename: str = "package.json"
    serializer: str = "json"
    log_source_id: str = "Installer"
    verbose_logs: bool = False
    remove_delay: float = 0.25
    max_orphan_passes: int = 3

    def __post_init__(self):
        from pkgroot.serializers import SERIALIZERS

        self.install_root = Path(self.install_root).expanduser()
        self.packages_dir = Path(self.packages_dir).expanduser()
        if not self.configuration_filename or not isinstance(self.configuration_filename, str):
            raise ValueError("configuration_filename must be a non-empty string")
        if self.serializer not in SERIALIZERS:
            raise ValueError(
                f"serializer must be one of: {', '.join(sorted(SERIALIZERS))}"
            )
        if not self.log_source_id or not isinstance(self.log_source_id, str):
            raise ValueError("log_source_id must be a non-empty string")
        if self.remove_delay < 0:
            raise ValueError("remove_delay must not be negative")
        if self.max_orphan_passes < 1:
            raise ValueError("max_orphan_passes must be at least 1")


@dataclass
class Config:
    """Root configuration: installer tunables plus default installation settings."""
    installer: InstallerConfig = field(default_factory=InstallerConfig)
    installation_settings: InstallationSettings = field(
        default_factory=InstallationSettings
    )


_INSTALLER_FIELDS = {
    "install_root": str,
    "packages_dir": str,
    "configuration_filename": str,
    "serializer": str,
    "log_source_id": str,
    "verbose_logs": bool,
    "remove_delay": (int, float),
    "max_orphan_passes": int,
}


def _validate_installer_section(data: dict) -> InstallerConfig:
    if not isinstance(data, dict):
        raise ConfigError(f"installer must be an object, got {type(data).__name__}")

    for key, value in data.items():
        if key not in _INSTALLER_FIELDS:
            raise ConfigError(f"Wrong configuration key: installer.{key}")
        expected = _INSTALLER_FIELDS[key]
        # bool is an int subclass; reject it for numeric fields
        if isinstance(value, bool) and expected is not bool:
            raise ConfigError(format_field_error("installer", key, "must be a number"))
        if not isinstance(value, expected):
            type_name = expected.__name__ if isinstance(expected, type) else "number"
            raise ConfigError(format_field_error("installer", key, f"must be a {type_name}"))

    try:
        return InstallerConfig(**data)
    except ValueError as e:
        raise ConfigError(f"installer: {e}") from e


def validate_config(data: dict) -> Config:
    """Validate and convert raw dict to Config dataclass.

    Missing sections fall back to their defaults.

    Args:
        data: Raw dict from load_config() containing config data

    Returns:
        Config object with validated sections

    Raises:
        ConfigError: If validation fails with clear field path errors
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a JSON object, got {type(data).__name__}")

    for key in data:
        if key not in CONFIG_SECTIONS:
            raise ConfigError(
                f"Wrong configuration key: {key}. "
                f"Must be one of: {', '.join(CONFIG_SECTIONS)}"
            )

    installer = _validate_installer_section(data.get("installer", {}))
    settings_data = data.get("installation_settings", {})
    if not isinstance(settings_data, dict):
        raise ConfigError(
            f"installation_settings must be an object, got {type(settings_data).__name__}"
        )
    settings = settings_from_dict(settings_data, "installation_settings")

    return Config(installer=installer, installation_settings=settings)


def config_to_dict(config: Config) -> dict:
    """Convert a Config back into the on-disk document shape."""
    installer = asdict(config.installer)
    installer["install_root"] = str(config.installer.install_root)
    installer["packages_dir"] = str(config.installer.packages_dir)
    return {
        "installer": installer,
        "installation_settings": settings_to_dict(config.installation_settings),
    }


def preprocess_jsonish(text: str) -> str:
    """
    Preprocess JSON-ish text into strict JSON.

    Handles:
    - // line comments (replaced with spaces)
    - Trailing commas before ] or } (replaced with space)
    - Properly handles strings (escaped quotes don't end strings)

    Replaces stripped characters with spaces to preserve line/column positions
    for error messages.

    Args:
        text: JSON-ish text with optional // comments and trailing commas

    Returns:
        Strict JSON text ready for json.loads()
    """
    result = []
    i = 0
    n = len(text)

    NORMAL = 0
    IN_STRING = 1
    ESCAPE = 2
    SLASH = 3  # saw '/', next '/' starts a comment
    IN_COMMENT = 4

    state = NORMAL

    while i < n:
        char = text[i]

        if state == IN_COMMENT:
            if char == "\n":
                result.append(char)
                state = NORMAL
            else:
                result.append(" ")
            i += 1

        elif state == ESCAPE:
            result.append(char)
            state = IN_STRING
            i += 1

        elif state == IN_STRING:
            if char == "\\":
                state = ESCAPE
            elif char == '"':
                state = NORMAL
            result.append(char)
            i += 1

        elif state == SLASH:
            if char == "/":
                result[-1] = " "
                result.append(" ")
                state = IN_COMMENT
            else:
                result.append(char)
                state = NORMAL
            i += 1

        else:
            if char == '"':
                result.append(char)
                state = IN_STRING
            elif char == "/":
                result.append(char)
                state = SLASH
            elif char == ",":
                # Trailing if only whitespace and // comments precede ] or }
                j = i + 1
                while j < n:
                    if text[j] in " \t\r\n":
                        j += 1
                    elif text[j] == "/" and j + 1 < n and text[j + 1] == "/":
                        j += 2
                        while j < n and text[j] != "\n":
                            j += 1
                    else:
                        break
                if j < n and text[j] in "]}":
                    result.append(" ")
                else:
                    result.append(char)
            else:
                result.append(char)
            i += 1

    return "".join(result)


def _format_syntax_error(original_text: str, error: json.JSONDecodeError) -> str:
    """Format a JSON syntax error with line, caret, and context.

    Args:
        original_text: The original text before preprocessing
        error: The JSONDecodeError raised by json.loads()

    Returns:
        A formatted error message string
    """
    lines = original_text.split('\n')
    line_num = error.lineno
    col_num = error.colno

    msg_parts = [
        f"Config syntax error at line {line_num}, col {col_num}: {error.msg}"
    ]

    if 1 <= line_num <= len(lines):
        msg_parts.append(lines[line_num - 1])
        msg_parts.append(' ' * (col_num - 1) + '^')

    return '\n'.join(msg_parts)


def loads_jsonish(text: str) -> dict:
    """Parse JSON-ish text into a dict.

    Raises:
        ConfigError: If the text has syntax errors or is not a JSON object
    """
    try:
        result = json.loads(preprocess_jsonish(text))
    except json.JSONDecodeError as e:
        raise ConfigError(_format_syntax_error(text, e)) from e

    if not isinstance(result, dict):
        raise ConfigError(f"Config must be a JSON object, got {type(result).__name__}")

    return result


def load_config(path_or_text: Path | str) -> dict:
    """Load and parse a JSON config file.

    Accepts either a file path or raw text. The input can be 'JSON-ish':
    trailing commas and // line comments are tolerated.

    Args:
        path_or_text: Either a Path to a JSON file, or a string containing
            JSON or JSON-ish text

    Returns:
        A dict containing the parsed config data

    Raises:
        ConfigError: If the file cannot be read or contains syntax errors.
        TypeError: If path_or_text is neither Path nor str.
    """
    if isinstance(path_or_text, Path):
        file_path = path_or_text
        try:
            original_text = file_path.read_text(encoding='utf-8')
        except FileNotFoundError:
            raise ConfigError(f"Config file not found: {file_path}")
        except PermissionError:
            raise ConfigError(f"Permission denied reading config file: {file_path}")
        except UnicodeDecodeError:
            raise ConfigError(f"Config file is not valid UTF-8: {file_path}")
        except OSError as e:
            raise ConfigError(f"Error reading config file {file_path}: {e}")
    elif isinstance(path_or_text, str):
        original_text = path_or_text
    else:
        raise TypeError(f"path_or_text must be Path or str, got {type(path_or_text).__name__}")

    return loads_jsonish(original_text)


def load_effective_config(path: Path | None) -> Config:
    """Load the config at ``path``; defaults when it is None or absent.

    Raises:
        ConfigError: If the file exists but is malformed
    """
    if path is None or not path.exists():
        return Config()
    return validate_config(load_config(path))


def write_config(path: Path, config: Config) -> None:
    """Write ``config`` to ``path`` as strict, indented JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config_to_dict(config), indent=2) + "\n", encoding="utf-8")


__all__ = [
    'ConfigError',
    'CONFIG_SECTIONS',
    'InstallerConfig',
    'Config',
    'validate_config',
    'config_to_dict',
    'preprocess_jsonish',
    'loads_jsonish',
    'load_config',
    'load_effective_config',
    'write_config',
]
