#!/usr/bin/env python3
"""
gen_bindings.py - GIR binding generator entry point

Generates bindings for the namespaces configured by a configuration module.

Usage:
    python scripts/gen_bindings.py --output DIR [--config bindings.gsk] [-v] [--log-file FILE] GIR...
"""

import argparse
import importlib
import os
import sys
from pathlib import Path

# Add scripts directory to path
script_dir = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, script_dir)

from gir_bindgen import Generator  # noqa: E402
from gir_bindgen.errors import ConfigError, PipelineError, RepositoryError  # noqa: E402
from gir_bindgen.logging import configure_logging  # noqa: E402


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Generate bindings from GIR files')
    parser.add_argument('gir', nargs='+', help='GIR files to load')
    parser.add_argument('--output', required=True, help='Output root directory')
    parser.add_argument('--config', default='bindings.gsk',
                        help='Configuration module providing configure(gen)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log filter decisions')
    parser.add_argument('--log-file', help='Also write the log to this file')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    log_file = Path(args.log_file) if args.log_file else None
    logger = configure_logging(verbose=args.verbose, log_file=log_file)

    gen = Generator(output_root=args.output)
    try:
        config = importlib.import_module(args.config)
        gen.load(*args.gir)
        config.configure(gen)
        gen.generate_all()
    except PipelineError as e:
        logger.error('%s', e)
        return 1
    except ConfigError as e:
        logger.error('invalid configuration value %r: %s', e.value, e)
        return 1
    except RepositoryError as e:
        logger.error('%s', e)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
