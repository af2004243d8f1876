# SPDX-FileCopyrightText: Copyright (c) 2025 The SpringCloth Developers
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import argparse

import numpy as np
import warp as wp

from ..utils import LogLevel, msg, set_log_level


def create_parser() -> argparse.ArgumentParser:
    """Creates an argument parser with the options shared by all examples."""
    parser = argparse.ArgumentParser(formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    parser.add_argument("--device", type=str, default=None, help="Override the default Warp device.")
    parser.add_argument("--num-frames", type=int, default=300, help="Total number of frames.")
    parser.add_argument("--fps", type=int, default=60, help="Frames per second.")
    parser.add_argument(
        "--output-path", type=str, default=None, help="Path of a .npy file to store the particle positions per frame."
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging and kernel timers.")
    parser.add_argument("--quiet", action="store_true", help="Suppress Warp compilation messages.")
    return parser


def init(parser: argparse.ArgumentParser | None = None, argv: list[str] | None = None) -> argparse.Namespace:
    """Parses the command line and configures Warp and the logger accordingly."""
    if parser is None:
        parser = create_parser()
    args = parser.parse_args(argv)

    if args.quiet:
        wp.config.quiet = True
    if args.verbose:
        set_log_level(LogLevel.DEBUG)
    if args.device:
        wp.set_device(args.device)
    return args


def run(example, args: argparse.Namespace) -> np.ndarray:
    """Steps an example for ``args.num_frames`` frames and records its particle positions.

    The example must provide ``step()`` and ``positions()``, and may provide ``test_final()``.

    Returns:
        The recorded positions, shape (num_frames + 1, particle_count, 3).
    """
    frames = [example.positions()]
    with wp.ScopedTimer("run", active=args.verbose):
        for frame in range(args.num_frames):
            example.step()
            frames.append(example.positions())
            if args.verbose and frame % args.fps == 0:
                msg.debug(f"frame {frame}/{args.num_frames}")
    frames = np.stack(frames)

    if args.output_path:
        np.save(args.output_path, frames)
        msg.notif(f"Saved {len(frames)} frames to {args.output_path}")

    if hasattr(example, "test_final"):
        example.test_final()
    return frames
