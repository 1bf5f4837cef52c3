"""Tests for loguru setup and the log() helper."""

import threading

from loguru import logger

from score_library.core.output import log, setup_loguru


def test_setup_loguru_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "score-library.log"

    setup_loguru(log_file, level="DEBUG")
    logger.debug("hello from test")
    logger.remove()

    assert "hello from test" in log_file.read_text()


def test_log_prints_and_logs(tmp_path, capsys):
    log_file = tmp_path / "out.log"
    setup_loguru(log_file)

    log("Pushed Bach", level="info")
    logger.remove()

    assert "Pushed Bach" in capsys.readouterr().out
    assert "Pushed Bach" in log_file.read_text()


def test_log_silent_thread(tmp_path, capsys):
    log_file = tmp_path / "out.log"
    setup_loguru(log_file)

    def worker():
        threading.current_thread().silent_logging = True
        log("background only")

    thread = threading.Thread(target=worker)
    thread.start()
    thread.join()
    logger.remove()

    assert "background only" not in capsys.readouterr().out
    assert "background only" in log_file.read_text()
