# MIT License
#
# Copyright (c) 2018 Evgeny Medvedev, evge.medvedev@gmail.com
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

import contextlib
import pathlib
import sys
from typing import IO, Any, Generator, Union

import orjson


# https://stackoverflow.com/questions/17602878/how-to-handle-both-with-open-and-sys-stdout-nicely
@contextlib.contextmanager
def smart_open(
    filename: Union[str, pathlib.Path, None] = "-",
    mode: str = "r",
    binary: bool = False,
) -> Generator[IO[Any], None, None]:
    """Opens `filename`, or yields stdin/stdout for `-` (and None) without closing them."""
    full_mode = mode + ("b" if binary else "")

    if filename and filename != "-":
        path = pathlib.Path(filename)
        if "w" in mode:
            path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, full_mode) as fh:
            yield fh
        return

    if "w" in mode:
        yield sys.stdout.buffer if binary else sys.stdout
    else:
        yield sys.stdin.buffer if binary else sys.stdin


def read_json(filename: Union[str, pathlib.Path, None]) -> Any:
    with smart_open(filename, "r", binary=True) as fh:
        return orjson.loads(fh.read())


def write_json(value: Any, filename: Union[str, pathlib.Path, None] = "-") -> None:
    payload = orjson.dumps(value, default=str, option=orjson.OPT_INDENT_2)
    with smart_open(filename, "w", binary=True) as fh:
        fh.write(payload)
        fh.write(b"\n")
        fh.flush()
