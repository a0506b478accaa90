"""
Entry point for running the walkthrough as a module.

Usage:
    python -m synthreg                       # Reference run, printed only
    python -m synthreg --output-dir results  # Also store the run and figures
    python -m synthreg --config my_run.json  # Override any WalkthroughConfig field
"""

import argparse
import json
import sys
from pathlib import Path

from .walkthrough import WalkthroughConfig, run_walkthrough


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='python -m synthreg',
        description='Fit small regression networks to noisy cos(x) + x data',
    )
    parser.add_argument('--output-dir', type=str, default=None,
                        help='Directory for stored runs and figures (default: print only)')
    parser.add_argument('--config', type=str, default=None,
                        help='JSON file overriding WalkthroughConfig fields')
    parser.add_argument('--no-plots', action='store_true',
                        help='Skip rendering figures')
    parser.add_argument('--quiet', action='store_true',
                        help='Only print the final comparison')
    args = parser.parse_args(argv)

    if args.config:
        config = WalkthroughConfig.from_dict(json.loads(Path(args.config).read_text()))
    else:
        config = WalkthroughConfig()

    result = run_walkthrough(
        config,
        output_dir=args.output_dir,
        plots=not args.no_plots,
        verbose=not args.quiet,
    )

    if args.quiet:
        for row in result.comparison:
            print(f"{row['rank']}. {row['model']:24s} rmse={row['rmse']:.4f}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
