"""
Formatting collaborator.

Generated and patched code can be piped through `forge fmt`. Formatting is best
effort: when the formatter is unavailable or rejects the input, the code is
returned unchanged and a warning is logged.
"""

import logging
import subprocess

logger = logging.getLogger(__name__)

DEFAULT_FORGE = "forge"


def format_source(text: str, executable: str = DEFAULT_FORGE) -> str:
    """
    Format Solidity source with `forge fmt`.

    Params:
        text: Source text to format
        executable: Name or path of the forge binary

    Returns:
        The formatted text, or the input when formatting is not possible
    """
    try:
        completed = subprocess.run(
            [executable, "fmt", "--raw", "-"],
            input=text,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError:
        logger.warning("'%s' was not found, keeping unformatted output", executable)
        return text

    if completed.returncode != 0:
        logger.warning("formatting failed, keeping unformatted output: %s", completed.stderr.strip())
        return text
    return completed.stdout
