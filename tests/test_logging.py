import logging

from news_crawler.utils.logging_config import log_operation, setup_logging


def test_log_operation_levels(caplog):
    logger = logging.getLogger("news_crawler.test")
    caplog.set_level(logging.DEBUG, logger="news_crawler.test")

    log_operation(logger, "crawl_site", "started", source="demo")
    log_operation(logger, "crawl_site", "failed", source="demo", error="boom")
    log_operation(logger, "crawl_site", "progress")

    assert [(r.levelno, r.getMessage()) for r in caplog.records] == [
        (logging.INFO, "crawl_site | started | source=demo"),
        (logging.ERROR, "crawl_site | failed | source=demo | error=boom"),
        (logging.DEBUG, "crawl_site | progress"),
    ]


def test_setup_logging_writes_file(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    log_file = tmp_path / "logs" / "crawler.log"
    try:
        setup_logging(level="warning", log_file=str(log_file))
        logging.getLogger("news_crawler.test").warning("disk almost full")
        logging.getLogger("news_crawler.test").info("not written")
        for handler in root.handlers:
            handler.flush()

        assert root.level == logging.WARNING
        content = log_file.read_text(encoding="utf-8")
        assert "WARNING  | news_crawler.test | test_logging.py" in content
        assert "disk almost full" in content
        assert "not written" not in content
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
