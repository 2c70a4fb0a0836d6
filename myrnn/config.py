import os
import warnings
from pathlib import Path
import yaml

DEFAULT_CONFIG_PATH = Path(os.path.join(Path.home(), ".cache", "myrnn", "default_config.yaml"))

DEFAULT_CONFIG = {
    "seed": None,
    "device": "cpu",
    "dtype": "float32",
}

### Environment variables win over whatever is in the yaml file ###
ENV_OVERRIDES = {
    "seed": "MYRNN_SEED",
    "device": "MYRNN_DEVICE",
    "dtype": "MYRNN_DTYPE",
}

def get_config_path():
    env_path = os.getenv("MYRNN_CONFIG")
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH

def save_config(config, config_path=None):
    """Save configuration to YAML file."""
    config_path = Path(config_path) if config_path is not None else get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        yaml.dump(config, f, default_flow_style=False)

    return config_path

def _parse_seed(value, source):
    """
    Seeds are ints or None. Anything else warns and falls back to the
    default seed instead of failing at import time.
    """
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        value = value.strip()
        if value.lower() in ("", "none", "null"):
            return None
        try:
            return int(value)
        except ValueError:
            pass
    warnings.warn(f"Invalid seed {value!r} from {source}, using {DEFAULT_CONFIG['seed']!r}")
    return DEFAULT_CONFIG["seed"]

def _apply_env(config):
    for key, env_name in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value is None:
            continue
        if key == "seed":
            value = _parse_seed(value, env_name)
        config[key] = value
    return config

def load_config(config_path=None):
    """
    Resolve the configuration: built-in defaults, updated by the yaml
    file (if there is one), updated by the MYRNN_* environment variables.

    A path passed in explicitly that does not exist is an error. A missing
    default file (or MYRNN_CONFIG file) just means we use the defaults,
    that is where `myrnn config` will write one.
    """
    config = DEFAULT_CONFIG.copy()

    if config_path is None:
        config_path = get_config_path()
        using_default = True
    else:
        config_path = Path(config_path)
        using_default = False

    if not config_path.exists():
        if not using_default:
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return _apply_env(config)

    try:
        with open(config_path, "r") as f:
            loaded = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        warnings.warn(f"Failed to load config from {config_path}: {e}, using defaults")
        loaded = None

    if loaded:
        if not isinstance(loaded, dict):
            warnings.warn(f"Config at {config_path} is not a mapping, using defaults")
        else:
            unknown = set(loaded) - set(DEFAULT_CONFIG)
            if unknown:
                warnings.warn(f"Ignoring unknown config keys {sorted(unknown)}")
            config.update({k: v for k, v in loaded.items() if k in DEFAULT_CONFIG})
            config["seed"] = _parse_seed(config["seed"], config_path)

    return _apply_env(config)
