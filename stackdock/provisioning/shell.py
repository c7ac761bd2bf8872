"""Shell command execution helpers shared by the pipeline and the transports."""

import asyncio
import logging

logger = logging.getLogger(__name__)


async def _read_lines(pipe, lines, level):
    async for raw_line in pipe:
        line = raw_line.decode().rstrip("\n")
        logger.log(level, line)
        lines.append(line)


async def run_process(command, cwd=None, stream=True, timeout=600, log_output=False, stdin=None):
    """Spawn `command` and wait for it, killing it after `timeout` seconds.

    Args:
        command: argv list, or a string run through the shell
        cwd: working directory for the process
        stream: with log_output off, leave stdout/stderr on the terminal
            and return them empty
        log_output: log every line as it arrives (stderr at ERROR level)
            and return the collected lines
        stdin: optional text fed to the process

    Returns:
        (returncode, stdout, stderr) tuple; spawn errors and timeouts give
        returncode 1.
    """
    display = command if isinstance(command, str) else " ".join(command)
    use_pipe = not stream or log_output
    pipes = {
        "cwd": cwd,
        "stdin": asyncio.subprocess.PIPE if stdin is not None else None,
        "stdout": asyncio.subprocess.PIPE if use_pipe else None,
        "stderr": asyncio.subprocess.PIPE if use_pipe else None,
    }
    try:
        if isinstance(command, str):
            proc = await asyncio.create_subprocess_shell(command, **pipes)
        else:
            proc = await asyncio.create_subprocess_exec(*command, **pipes)
    except FileNotFoundError:
        name = display.split()[0] if display else display
        logger.error(f"Error: '{name}' not found. Is it installed and on PATH?")
        return 1, "", f"'{name}' not found"
    except OSError as e:
        logger.error(f"Error running command: {e}")
        return 1, "", str(e)

    data = stdin.encode() if stdin is not None else None
    try:
        if log_output:
            if data is not None:
                proc.stdin.write(data)
                await proc.stdin.drain()
                proc.stdin.close()
            stdout_lines, stderr_lines = [], []
            await asyncio.wait_for(
                asyncio.gather(
                    _read_lines(proc.stdout, stdout_lines, logging.INFO),
                    _read_lines(proc.stderr, stderr_lines, logging.ERROR),
                    proc.wait(),
                ),
                timeout=timeout,
            )
            return proc.returncode, "\n".join(stdout_lines), "\n".join(stderr_lines)

        stdout_bytes, stderr_bytes = await asyncio.wait_for(proc.communicate(data), timeout=timeout)
        stdout = stdout_bytes.decode() if stdout_bytes else ""
        stderr = stderr_bytes.decode() if stderr_bytes else ""
        return proc.returncode, stdout, stderr
    except TimeoutError:
        logger.error(f"Command timed out after {timeout}s: {display}")
        proc.kill()
        await proc.wait()
        return 1, "", "timeout"


async def run_shell_cmd(command, dry_run=False, timeout=600, stdin=None, cwd=None):
    """Run an argv command, capturing its output.

    In dry-run mode the command is only logged and (0, "", "") returned.
    """
    if dry_run:
        logger.info(f"[dry-run] {' '.join(command)}")
        return 0, "", ""
    return await run_process(command, cwd=cwd, stream=False, timeout=timeout, stdin=stdin)
