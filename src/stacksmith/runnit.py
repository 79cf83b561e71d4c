import asyncio
from contextlib import closing
import logging
import sys
from typing import Callable, List, Optional

# https://kevinmccarthy.org/2016/07/25/streaming-subprocess-stdin-and-stdout-with-asyncio-in-python/

logger = logging.getLogger(__name__)

STDOUT = "stdout"
STDERR = "stderr"

STREAM_LIMIT = 2 ** 16

LineCallback = Callable[[str, str], None]


async def _read_stream(stream, origin: str, callback: LineCallback):
    while True:
        try:
            line = await stream.readline()
        except Exception as e:
            line = f"error reading process {origin}: {str(e)}".encode("utf-8")

        if line:
            callback(line.decode("utf-8", errors="replace").rstrip(), origin)
        else:
            break


async def _stream_subprocess(command, env, callback, stream_limit):
    process = await asyncio.create_subprocess_exec(*command,
                                                   env=env,
                                                   stdout=asyncio.subprocess.PIPE,
                                                   stderr=asyncio.subprocess.PIPE,
                                                   limit=stream_limit)
    await asyncio.gather(
        _read_stream(process.stdout, STDOUT, callback),
        _read_stream(process.stderr, STDERR, callback)
    )

    return await process.wait()


def _log_line(line: str, origin: str) -> None:
    if origin == STDERR:
        logger.warning(line)
    else:
        logger.info(line)


def runnit(cmd: List[str], callback: LineCallback = None, env: dict = None, stream_limit: int = STREAM_LIMIT) -> int:
    """
    Runs cmd, handing each line of its stdout and stderr to callback(line, origin) as it is
    produced, and returns the exit code. Lines keep their order within a stream; the two
    streams are read independently.
    """
    if not isinstance(cmd, list):
        raise TypeError(f"expected list, but was given {type(cmd).__name__}")
    if not cmd:
        raise ValueError("command cannot be empty")

    if callback is None:
        callback = _log_line

    # http://stackoverflow.com/questions/37778019/aiohttp-asyncio-runtimeerror-event-loop-is-closed
    with closing(asyncio.new_event_loop()) as loop:
        asyncio.set_event_loop(loop)
        try:
            rc = loop.run_until_complete(
                _stream_subprocess(cmd, env, callback, stream_limit)
            )
        finally:
            asyncio.set_event_loop(None)
        return rc


def _echo(line: str, origin: str) -> None:
    print(line, file=sys.stderr if origin == STDERR else sys.stdout)


def run_cmd(cmd: List[str]) -> Optional[int]:
    """
    Runs cmd, copying its output to this process's stdout and stderr. A missing executable
    is reported and None is returned.
    """
    try:
        ret = runnit(cmd, callback=_echo)
    except FileNotFoundError as fnf:
        logger.error(f"unable to run command: {fnf}")
        print(" ".join(cmd), file=sys.stderr)
        return None

    if ret != 0:
        logger.warning(f"{cmd[0]} exited with code {ret}")
    return ret
