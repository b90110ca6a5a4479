import logging

from local_rt_setup.logging import log_separator, setup_logging


def test_setup_logging_creates_file_and_console_handlers(tmp_path):
    log_dir = tmp_path / "logs"
    logger = setup_logging(
        log_dir=str(log_dir),
        file_log_level=logging.DEBUG,
        cli_log_level=logging.WARNING,
        force_reconfigure=True,
    )

    assert logger.name == "local_rt_setup"
    assert logger.level == logging.DEBUG
    file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
    stream_handlers = [
        h for h in logger.handlers if not isinstance(h, logging.FileHandler)
    ]
    assert len(file_handlers) == 1
    assert len(stream_handlers) == 1
    assert stream_handlers[0].level == logging.WARNING
    assert (log_dir / "local_rt_setup.log").exists()


def test_setup_logging_does_not_duplicate_handlers(tmp_path):
    logger = setup_logging(log_dir=str(tmp_path), force_reconfigure=True)
    count = len(logger.handlers)
    setup_logging(log_dir=str(tmp_path))
    assert len(logger.handlers) == count


def test_log_separator_writes_to_file(tmp_path):
    logger = setup_logging(log_dir=str(tmp_path), force_reconfigure=True)
    log_separator(logger, app_name="Local Rt Setup", app_version="1.2.3")
    for handler in logger.handlers:
        handler.flush()

    content = (tmp_path / "local_rt_setup.log").read_text()
    assert "Local Rt Setup v1.2.3" in content
    assert "Python Version:" in content
