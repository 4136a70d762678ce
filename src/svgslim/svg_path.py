# Copyright 2020 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Operations on path data: translation, concatenation and absolute form."""
import re
from typing import Generator, Iterable, Optional, Tuple
from svgslim import svg_meta
from svgslim.svg_numbers import format_number
from svgslim.svg_path_iter import PathCommand, PathDataError, parse_svg_path


PathCommandSeq = Iterable[PathCommand]
PathCommandGen = Generator[PathCommand, None, None]

_NUMBER = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"
_LEADING_MOVE_RE = re.compile(rf"m[\s,]*({_NUMBER})[\s,]*({_NUMBER})[\s,]*")
_STARTS_WITH_NUMBER_RE = re.compile(r"[-+.\d]")


def parse_path(d: str) -> Tuple[PathCommand, ...]:
    """Parse path data into one command per operand group."""
    return tuple(parse_svg_path(d, exploded=True))


def path_segment(command: PathCommand) -> str:
    return command.cmd + " ".join(format_number(a) for a in command.args)


def path_to_string(commands: PathCommandSeq) -> str:
    # command letters delimit commands, no whitespace needed between them
    return "".join(path_segment(c) for c in commands)


def _shift(command: PathCommand, dx: float, dy: float) -> PathCommand:
    x_coords, y_coords = svg_meta.cmd_coords(command.cmd)
    group = svg_meta.num_args(command.cmd)
    if not group:
        return command
    args = list(command.args)
    for offset in range(0, len(args), group):
        for i in x_coords:
            args[offset + i] += dx
        for i in y_coords:
            args[offset + i] += dy
    return command._replace(args=tuple(args))


def translate_commands(
    commands: PathCommandSeq, dx: float, dy: float
) -> PathCommandGen:
    """Move absolute commands by (dx, dy).

    Relative commands are unaffected by translation, except for an initial
    relative moveto which is absolute by definition; it's emitted as M.
    """
    for idx, command in enumerate(commands):
        if idx == 0 and command.cmd == "m":
            yield _shift(PathCommand("M", command.args[:2]), dx, dy)
            if len(command.args) > 2:
                yield PathCommand("l", command.args[2:])
        elif command.absolute:
            yield _shift(command, dx, dy)
        else:
            yield command


def translate_path_data(d: str, dx: float, dy: float) -> str:
    """Raises PathDataError if d doesn't parse."""
    return path_to_string(translate_commands(parse_svg_path(d), dx, dy))


def normalize_start(d: str) -> Optional[str]:
    """Rewrite d so it starts with an absolute moveto.

    A path that starts with a relative moveto can't be appended to another
    path as is: the m would become relative to wherever the other path ended.
    Returns None if d is empty or isn't valid path data.
    """
    d = d.strip()
    if not d:
        return None
    try:
        parse_path(d)
    except PathDataError:
        return None
    if d.startswith("M"):
        return d
    match = _LEADING_MOVE_RE.match(d)
    if match is None:
        return None
    x, y = match.groups()
    rest = d[match.end() :]
    start = f"M{x} {y}"
    # extra pairs after m x y are relative linetos
    if _STARTS_WITH_NUMBER_RE.match(rest):
        return f"{start}l{rest}"
    return start + rest


def absolute_commands(commands: PathCommandSeq) -> PathCommandGen:
    """Yield absolute commands using only M, L, C, Q, A and Z.

    Shorthands are expanded: H and V become L, S becomes C, T becomes Q.
    Expects exploded commands, one operand group per command.
    """
    x = y = 0.0
    start = (0.0, 0.0)
    # the last control point of the previous C or Q, for S and T reflection
    last_ctrl = None
    prev_letter = None
    for command in commands:
        letter = command.letter
        args = list(command.args)
        if not command.absolute:
            x_coords, y_coords = svg_meta.cmd_coords(command.cmd)
            for i in x_coords:
                args[i] += x
            for i in y_coords:
                args[i] += y

        if letter == "H":
            letter, args = "L", [args[0], y]
        elif letter == "V":
            letter, args = "L", [x, args[0]]
        elif letter == "S":
            if prev_letter == "C":
                args = [2 * x - last_ctrl[0], 2 * y - last_ctrl[1]] + args
            else:
                args = [x, y] + args
            letter = "C"
        elif letter == "T":
            if prev_letter == "Q":
                args = [2 * x - last_ctrl[0], 2 * y - last_ctrl[1]] + args
            else:
                args = [x, y] + args
            letter = "Q"

        if letter == "C":
            last_ctrl = (args[2], args[3])
        elif letter == "Q":
            last_ctrl = (args[0], args[1])

        if letter == "Z":
            x, y = start
        else:
            x, y = args[-2], args[-1]
        if letter == "M":
            start = (x, y)
        prev_letter = letter
        yield PathCommand(letter, tuple(args))
