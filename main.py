# main.py
import sys, os, atexit
from pathlib import Path
from PySide6 import QtWidgets
from paintpos.ui.main_window import MainWindow
from paintpos.util.logging import configure_logging, get_logger

LOCKFILE = Path(".paintpos.lock")

logger = get_logger("main")


def _cleanup_lock():
    try:
        LOCKFILE.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove %s: %s", LOCKFILE, e)


def run() -> int:
    configure_logging()
    if LOCKFILE.exists():
        print("The application is already running.")
        return 1
    LOCKFILE.write_text(str(os.getpid()))
    atexit.register(_cleanup_lock)

    app = QtWidgets.QApplication(sys.argv)
    win = MainWindow()
    win.show()
    ret = app.exec()
    _cleanup_lock()
    return ret


if __name__ == "__main__":
    sys.exit(run())
