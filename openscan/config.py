"""
Configuration file handling.

The configuration is a TOML file created with defaults on first use. It is
loaded once and passed explicitly to the pieces that need it.
"""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .exceptions import ConfigError

DEFAULT_CONFIG_PATH = 'resources/config.toml'
DEFAULT_MODEL_URL = 'https://github.com/Fyko/nsfw/releases/latest/download/model.onnx'

DEFAULT_CONFIG = """# Open Directory Scanner Configuration

# Model information
[model]
url = "https://github.com/Fyko/nsfw/releases/latest/download/model.onnx"
path = "resources/model.onnx"

# NSFW detection thresholds
[thresholds]
porn = 0.5    # Porn classification threshold
hentai = 0.6  # Hentai classification threshold
sexy = 0.8    # Sexy classification threshold

# Scanner defaults
[scanner]
default_depth = 3
default_timeout = 30
delay = 0.0   # Seconds to wait before each request

# Report settings
[report]
include_nsfw_urls = true  # Whether to include URLs of NSFW content in reports
"""


@dataclass
class Thresholds:
    porn: float = 0.5
    hentai: float = 0.6
    sexy: float = 0.8


@dataclass
class ModelSettings:
    url: str = DEFAULT_MODEL_URL
    path: str = 'resources/model.onnx'


@dataclass
class ScannerSettings:
    default_depth: int = 3
    default_timeout: int = 30
    delay: float = 0.0


@dataclass
class ReportSettings:
    include_nsfw_urls: bool = True


@dataclass
class Config:
    model: ModelSettings = field(default_factory=ModelSettings)
    thresholds: Thresholds = field(default_factory=Thresholds)
    scanner: ScannerSettings = field(default_factory=ScannerSettings)
    report: ReportSettings = field(default_factory=ReportSettings)


def _get(section, name, key, expected, default):
    value = section.get(key, default)
    # bool is an int subclass; keep them apart
    if isinstance(value, bool) and bool not in expected:
        raise ConfigError(f"[{name}] {key} must be a number, got {value!r}")
    if not isinstance(value, expected):
        raise ConfigError(f"[{name}] {key} has invalid value {value!r}")
    return value


def _section(data, name):
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{name}] must be a table")
    return section


def from_dict(data):
    """Build a Config from parsed TOML, filling in defaults"""
    defaults = Config()

    model = _section(data, 'model')
    thresholds = _section(data, 'thresholds')
    scanner = _section(data, 'scanner')
    report = _section(data, 'report')

    number = (int, float)
    config = Config(
        model=ModelSettings(
            url=_get(model, 'model', 'url', (str,), defaults.model.url),
            path=_get(model, 'model', 'path', (str,), defaults.model.path),
        ),
        thresholds=Thresholds(
            porn=float(_get(thresholds, 'thresholds', 'porn', number, defaults.thresholds.porn)),
            hentai=float(_get(thresholds, 'thresholds', 'hentai', number, defaults.thresholds.hentai)),
            sexy=float(_get(thresholds, 'thresholds', 'sexy', number, defaults.thresholds.sexy)),
        ),
        scanner=ScannerSettings(
            default_depth=_get(scanner, 'scanner', 'default_depth', (int,), defaults.scanner.default_depth),
            default_timeout=_get(scanner, 'scanner', 'default_timeout', (int,), defaults.scanner.default_timeout),
            delay=float(_get(scanner, 'scanner', 'delay', number, defaults.scanner.delay)),
        ),
        report=ReportSettings(
            include_nsfw_urls=_get(report, 'report', 'include_nsfw_urls', (bool,),
                                   defaults.report.include_nsfw_urls),
        ),
    )

    if config.scanner.default_depth < 0:
        raise ConfigError("[scanner] default_depth must not be negative")
    if config.scanner.default_timeout <= 0:
        raise ConfigError("[scanner] default_timeout must be positive")
    if config.scanner.delay < 0:
        raise ConfigError("[scanner] delay must not be negative")

    return config


def load_config(path=DEFAULT_CONFIG_PATH):
    """Load the configuration file, creating a default one if it is missing"""
    config_path = Path(path)
    if not config_path.exists():
        print("[*] Config file not found, creating default config...")
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(DEFAULT_CONFIG, encoding='utf-8')
        print(f"[+] Default config file created at {config_path}")

    try:
        with open(config_path, 'rb') as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid config file {config_path}: {e}") from e

    return from_dict(data)
