"""
Glowstick Command Line Interface

Usage:
    glowstick <command> [options]

Commands:
    render      Render image(s) through the effect
    graph       Show the node chain assembled for a parameter set
    params      List the effect parameters
    config      Create an example configuration file

Examples:
    glowstick render photo.jpg
    glowstick render photo.jpg -o neon.png --set blend_mode=hardlight --set bloom_strength=8
    glowstick render photo.jpg -c glowstick.json -p neon -p dreamy
    glowstick graph --set softglow_brightness=0.1
    glowstick config --create glowstick.json
"""

import argparse
import sys
from pathlib import Path

from glowstick import __version__


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog='glowstick',
        description='Neon glow-stick image effect',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        '-V', '--version',
        action='version',
        version=f'glowstick {__version__}',
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Options shared by render and graph
    params_parser = argparse.ArgumentParser(add_help=False)
    params_parser.add_argument(
        '-c', '--config',
        help='Configuration file with presets (JSON)',
    )
    params_parser.add_argument(
        '-p', '--preset',
        action='append',
        dest='presets',
        metavar='NAME',
        help='Preset from the config file (repeat to stack effects)',
    )
    params_parser.add_argument(
        '--set', '-s',
        action='append',
        dest='overrides',
        metavar='NAME=VALUE',
        help='Override an effect parameter (can be used multiple times)',
    )
    params_parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Print graph assembly messages',
    )

    # Render command
    render_parser = subparsers.add_parser(
        'render',
        parents=[params_parser],
        help='Render image(s) through the effect',
    )
    render_parser.add_argument('inputs', nargs='+', help='Input image file(s)')
    render_parser.add_argument(
        '-o', '--output',
        help='Output file (single input) or directory (default: <input><suffix>.<ext>)',
    )
    render_parser.add_argument(
        '--16bit',
        action='store_true',
        dest='sixteen_bit',
        help='Write 16-bit output where the format supports it',
    )

    # Graph command
    subparsers.add_parser(
        'graph',
        parents=[params_parser],
        help='Show the node chain for a parameter set',
    )

    # Params command
    subparsers.add_parser(
        'params',
        help='List effect parameters',
    )

    # Config command
    config_parser = subparsers.add_parser(
        'config',
        help='Create an example configuration file',
    )
    config_parser.add_argument(
        '--create',
        metavar='PATH',
        default='glowstick.json',
        help='Where to write the example config (default: glowstick.json)',
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        if args.command == 'render':
            return run_render(args)
        elif args.command == 'graph':
            return run_graph(args)
        elif args.command == 'params':
            return run_params(args)
        elif args.command == 'config':
            return run_config(args)
    except (ValueError, FileNotFoundError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    parser.print_help()
    return 1


def _load_config(args):
    from glowstick.core.config import Config, env_flag, get_env_config

    config = Config.load(args.config) if args.config else Config()
    env = get_env_config()
    if 'verbose' in env:
        config.global_settings.verbose = env_flag(env['verbose'])
    if args.verbose:
        config.global_settings.verbose = True
    return config


def build_effects(args):
    """Create one effect per preset (or one for no preset), as a FilterChain."""
    from glowstick.core.base import FilterChain
    from glowstick.effect import GlowstickEffect

    config = _load_config(args)
    settings = config.global_settings

    chain = FilterChain()
    for preset in args.presets or [None]:
        values = config.resolve_params(preset, args.overrides)
        effect = GlowstickEffect(
            values,
            preprocess=settings.preprocess,
            verbose=settings.verbose,
        )
        chain.add(effect)
    return chain, config


def _output_path(input_path: Path, output: str | None, suffix: str, many: bool) -> Path:
    if output is None:
        return input_path.with_name(f"{input_path.stem}{suffix}{input_path.suffix}")
    out = Path(output)
    if many or out.is_dir():
        out.mkdir(parents=True, exist_ok=True)
        return out / input_path.name
    return out


def run_render(args) -> int:
    """Run the render command."""
    from glowstick.core.image import read_image, write_image

    chain, config = build_effects(args)
    many = len(args.inputs) > 1

    for name in args.inputs:
        input_path = Path(name)
        loaded = read_image(input_path)
        print(f"Rendering {input_path} ({loaded.properties.width}x{loaded.properties.height})")

        result = chain.apply(loaded.rgb)

        out_path = _output_path(input_path, args.output, config.global_settings.output_suffix, many)
        dtype = 'uint16' if args.sixteen_bit else 'uint8'
        write_image(out_path, result, loaded.alpha, dtype=dtype)
        print(f"  -> {out_path}")

    print("Done!")
    return 0


def run_graph(args) -> int:
    """Print the assembled chain of every effect instance."""
    chain, _ = build_effects(args)
    for i, effect in enumerate(chain.filters):
        print(f"Effect {i}: {effect.params.blend_mode.value}")
        print(f"  {effect.describe()}")
        bypass = effect.state.bypass
        print(f"  bloom: {'on' if bypass.bloom_active else 'bypassed'}, "
              f"softglow: {'on' if bypass.softglow_active else 'bypassed'}")
    return 0


def run_params(args) -> int:
    """List the effect parameters."""
    from glowstick.effect import PARAMETERS

    for param in PARAMETERS:
        default = param.default.value if hasattr(param.default, 'value') else param.default
        if param.choices:
            range_text = ', '.join(param.choices)
        else:
            lo = '-inf' if param.min is None else param.min
            hi = 'inf' if param.max is None else param.max
            range_text = f"{lo} .. {hi}" if param.type != 'color' else 'hex colour'
        print(f"{param.name} ({param.type}, default {default})")
        print(f"  {param.title}: {param.description}")
        print(f"  range: {range_text}")
    return 0


def run_config(args) -> int:
    """Create an example configuration file."""
    from glowstick.core.config import create_example_config

    create_example_config(args.create)
    return 0


if __name__ == '__main__':
    sys.exit(main())
