"""Console output helpers with a switchable debug mode."""

import threading

_console_lock = threading.Lock()
_debug_mode = False


def make_safe_string(text):
    """Return ``text`` as a string, or ``"(null)"`` when it is None."""
    if text is None:
        return "(null)"
    return str(text)


def set_debug_mode(enabled):
    """Turn debug output on or off."""
    global _debug_mode
    _debug_mode = bool(enabled)


def get_debug_mode():
    """Return whether debug output is enabled."""
    return _debug_mode


def debug_print(message, force=False):
    """Print ``message`` if debug mode is on or ``force`` is true."""
    if _debug_mode or force:
        with _console_lock:
            print(message, flush=True)


def print_message(message):
    """Print a debug message; shown only in debug mode."""
    debug_print(message, False)


def print_error(message):
    """Print an error message; always shown."""
    debug_print("Error: " + message, True)


def print_status(message):
    """Print an important status message; always shown."""
    debug_print(message, True)


def print_warning(message):
    """Print a warning; always shown."""
    debug_print("Warning: " + message, True)