#!/usr/bin/env python3
"""
===============================================================================
QUATROT - COMMAND LINE ENTRY POINT
===============================================================================

USAGE:
    quatrot rotate --quat 0 1 0 0 --vec 1 2 3
    quatrot to-matrix --quat 1 2 3 4
    quatrot from-matrix --matrix 1 0 0 0 1 0 0 0 1 --epsilon 1e-6
    quatrot batch config/example_batch.yaml --output report.csv

The batch command checks, for every configured quaternion, that
    - quaternion -> matrix -> quaternion recovers q up to sign,
    - rotate(v) matches the sandwich product q * v * q^-1,
    - rotate(v) preserves |v|,
all within the configured tolerance, and writes one CSV row per quaternion.
It exits with status 1 if any check fails.
===============================================================================
"""

import argparse
import logging
import sys
from typing import List, Optional

import numpy as np
import pandas as pd

from quatrot.config import BatchConfig, load_config
from quatrot.constants import LOG_FORMAT
from quatrot.conversions import (
    is_rotation_matrix, quaternion_from_rotation_matrix, select_branch
)
from quatrot.exceptions import DegenerateNormError, QuatRotError
from quatrot.quaternion import Quaternion
from quatrot.vector import Vector3

logger = logging.getLogger('quatrot')


# =============================================================================
# BATCH CHECKS
# =============================================================================

def check_quaternion(q: Quaternion, vectors: List[Vector3],
                     tolerance: float) -> dict:
    """
    Run the consistency checks for one quaternion.

    Returns
    -------
    dict
        One report row: components, selected branch, worst-case errors and
        pass/fail flags.
    """
    matrix = q.to_rotation_matrix()
    recovered = quaternion_from_rotation_matrix(matrix)

    q_arr = q.components
    r_arr = recovered.components
    roundtrip_error = min(np.abs(r_arr - q_arr).max(), np.abs(r_arr + q_arr).max())

    sandwich_error = 0.0
    norm_error = 0.0
    for v in vectors:
        fast = q.rotate(v)
        sandwich = q.multiply(v.to_pure_quaternion()).multiply(q.conjugate())
        sandwich_error = max(sandwich_error,
                             np.abs(fast.to_array() - sandwich.vector_part().to_array()).max())
        norm_error = max(norm_error, abs(fast.norm() - v.norm()))

    row = {
        'w': q.w, 'x': q.x, 'y': q.y, 'z': q.z,
        'branch': select_branch(matrix),
        'roundtrip_error': float(roundtrip_error),
        'sandwich_error': float(sandwich_error),
        'norm_error': float(norm_error),
    }
    row['passed'] = bool(
        roundtrip_error < tolerance
        and sandwich_error < tolerance
        and norm_error < tolerance
    )
    return row


def _degenerate_row(case: int, q: Quaternion) -> dict:
    """Report row for a quaternion with no usable direction (zero norm)."""
    return {
        'case': case, 'w': q.w, 'x': q.x, 'y': q.y, 'z': q.z,
        'branch': -1,
        'roundtrip_error': float('nan'),
        'sandwich_error': float('nan'),
        'norm_error': float('nan'),
        'passed': False,
    }


def run_batch(config: BatchConfig) -> pd.DataFrame:
    """Check every configured quaternion and collect the results."""
    vectors = [Vector3(*v) for v in config.vectors]
    rows = []

    for i, components in enumerate(config.quaternions):
        q = Quaternion(*components)
        try:
            if config.normalize_inputs:
                q.normalize()
            row = check_quaternion(q, vectors, config.tolerance)
        except DegenerateNormError as exc:
            logger.warning(f"Case {i}: FAILED {exc}")
            rows.append(_degenerate_row(i, q))
            continue
        row['case'] = i
        rows.append(row)

        if row['passed']:
            logger.debug(f"Case {i}: OK (branch {row['branch']})")
        else:
            logger.warning(
                f"Case {i}: FAILED roundtrip={row['roundtrip_error']:.2e} "
                f"sandwich={row['sandwich_error']:.2e} norm={row['norm_error']:.2e}"
            )

    columns = ['case', 'w', 'x', 'y', 'z', 'branch', 'roundtrip_error',
               'sandwich_error', 'norm_error', 'passed']
    return pd.DataFrame(rows, columns=columns)


# =============================================================================
# COMMANDS
# =============================================================================

def _format_row(values) -> str:
    return '  '.join(f"{v:+.8f}" for v in values)


def cmd_rotate(args: argparse.Namespace) -> int:
    q = Quaternion(*args.quat)
    v = Vector3(*args.vec)
    print(_format_row(q.rotate(v)))
    return 0


def cmd_to_matrix(args: argparse.Namespace) -> int:
    q = Quaternion(*args.quat)
    q.normalize()
    for row in q.to_rotation_matrix():
        print(_format_row(row))
    return 0


def cmd_from_matrix(args: argparse.Namespace) -> int:
    matrix = np.array(args.matrix, dtype=float).reshape(3, 3)
    if args.epsilon is not None and not is_rotation_matrix(matrix, args.epsilon):
        logger.warning(
            f"Input is not a rotation matrix at tolerance {args.epsilon:g}; "
            "the result is meaningless"
        )
    q = quaternion_from_rotation_matrix(matrix)
    print(_format_row(q))
    return 0


def cmd_batch(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    results = run_batch(config)

    n_failed = int((~results['passed']).sum())
    logger.info(f"{len(results) - n_failed}/{len(results)} cases passed")

    if args.output:
        results.to_csv(args.output, index=False)
        logger.info(f"Report written to {args.output}")
    else:
        print(results.to_string(index=False))

    return 1 if n_failed else 0


# =============================================================================
# ARGUMENT PARSING
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='quatrot',
        description='Quaternion / rotation matrix utilities',
    )
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging verbosity (default: INFO)')
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('rotate', help='Rotate a vector by a quaternion')
    p.add_argument('--quat', nargs=4, type=float, required=True,
                   metavar=('W', 'X', 'Y', 'Z'))
    p.add_argument('--vec', nargs=3, type=float, required=True,
                   metavar=('X', 'Y', 'Z'))
    p.set_defaults(func=cmd_rotate)

    p = sub.add_parser('to-matrix', help='Normalize a quaternion and print its rotation matrix')
    p.add_argument('--quat', nargs=4, type=float, required=True,
                   metavar=('W', 'X', 'Y', 'Z'))
    p.set_defaults(func=cmd_to_matrix)

    p = sub.add_parser('from-matrix', help='Recover the quaternion of a rotation matrix')
    p.add_argument('--matrix', nargs=9, type=float, required=True,
                   metavar='M', help='Row-major M00 M01 ... M22')
    p.add_argument('--epsilon', type=float, default=None,
                   help='Warn if the input is not a rotation at this tolerance')
    p.set_defaults(func=cmd_from_matrix)

    p = sub.add_parser('batch', help='Run consistency checks from a YAML config')
    p.add_argument('config', help='Path to the YAML batch configuration')
    p.add_argument('--output', default=None, help='CSV report path')
    p.set_defaults(func=cmd_batch)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    try:
        return args.func(args)
    except QuatRotError as exc:
        logger.error(str(exc))
        return 1


if __name__ == '__main__':
    sys.exit(main())
