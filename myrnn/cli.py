import sys
import shutil
import argparse
import questionary
from .config import DEFAULT_CONFIG, load_config, save_config, get_config_path

custom_style_fancy = questionary.Style([
    ("highlighted", "fg:#00ff88 bold"),
])

terminal_width = shutil.get_terminal_size().columns

def _print_config(title, config):
    print("\n" + "-" * terminal_width)
    print(title)
    print("-" * terminal_width)
    for key, value in config.items():
        print(f"  {key}: {value}")
    print("-" * terminal_width)

def interactive_config():
    """Ask for every config value, starting from the current ones."""
    current = load_config()

    seed = questionary.text(
        "Graph-level random seed (empty for none):",
        default="" if current["seed"] is None else str(current["seed"]),
        validate=lambda s: s.strip() == "" or s.strip().lstrip("-").isdigit(),
        style=custom_style_fancy,
    ).ask()
    if seed is None:
        return None

    device = questionary.select(
        "Default device for new layers:",
        choices=["cpu", "cuda"],
        default=current["device"] if current["device"] in ("cpu", "cuda") else "cpu",
        style=custom_style_fancy,
    ).ask()
    if device is None:
        return None

    dtype = questionary.select(
        "Default dtype for new layers:",
        choices=["float32", "float64", "float16"],
        default=current["dtype"],
        style=custom_style_fancy,
    ).ask()
    if dtype is None:
        return None

    return {
        "seed": int(seed) if seed.strip() else None,
        "device": device,
        "dtype": dtype,
    }

def config_command(args):
    if args.seed is None and args.device is None and args.dtype is None and not args.reset:
        config = interactive_config()
        if config is None:
            print("\nConfiguration not saved.")
            return 1
    else:
        config = DEFAULT_CONFIG.copy() if args.reset else load_config()
        if args.seed is not None:
            config["seed"] = None if args.seed.lower() in ("none", "null") else int(args.seed)
        if args.device is not None:
            config["device"] = args.device
        if args.dtype is not None:
            config["dtype"] = args.dtype

    path = save_config(config, args.config)
    _print_config("Saved Configuration:", config)
    print(f"Configuration saved to {path}")
    return 0

def env_command(args):
    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"{e}. Run `myrnn config` to generate a config file")
        return 1

    _print_config("Resolved Configuration:", config)
    print(f"Config file: {args.config or get_config_path()}")
    return 0

def main(argv=None):

    parser = argparse.ArgumentParser(prog="myrnn")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    config_parser = subparsers.add_parser("config", help="Create or update the config file")
    config_parser.add_argument("--config", type=str, default=None, help="Path to config file")
    config_parser.add_argument("--seed", type=str, default=None, help="Graph-level seed, or 'none'")
    config_parser.add_argument("--device", type=str, default=None, help="cpu, cuda or cuda:<idx>")
    config_parser.add_argument("--dtype", type=str, default=None, help="float32, float64, ...")
    config_parser.add_argument("--reset", action="store_true", help="Start from the built-in defaults")

    env_parser = subparsers.add_parser("env", help="See the resolved configuration")
    env_parser.add_argument("--config", type=str, default=None, help="Path to config file")

    args = parser.parse_args(argv)

    if args.command == "config":
        return config_command(args)
    elif args.command == "env":
        return env_command(args)

    parser.print_help()
    return 0

if __name__ == "__main__":
    sys.exit(main())
