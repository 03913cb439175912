import logging

from menulib.utils.logger import logger, log_exception, set_request_id


def test_messages_carry_request_id(caplog):
    set_request_id('5fd0dd84a52a')
    with caplog.at_level(logging.DEBUG, logger=logger.name):
        logger.info('listing menu')
        logger.error('listing failed')
    assert [record.getMessage() for record in caplog.records] == [
        '[5fd0dd84a52a] : listing menu', '[5fd0dd84a52a] : listing failed'
    ]


def test_exception_is_prefixed_once(caplog):
    set_request_id('5fd0dd84a52a')
    with caplog.at_level(logging.ERROR, logger=logger.name):
        try:
            raise ValueError('broken image')
        except ValueError:
            logger.exception('upload failed')
    record = caplog.records[-1]
    assert record.getMessage() == '[5fd0dd84a52a] : upload failed'
    assert record.levelno == logging.ERROR
    assert record.exc_info[0] is ValueError


def test_log_exception_is_prefixed_once(caplog):
    set_request_id('aee9d9e6eb8d')
    with caplog.at_level(logging.ERROR, logger=logger.name):
        log_exception(RuntimeError('table is gone'), status_code=500, msg='Server error')
    message = caplog.records[-1].getMessage()
    assert message.startswith('[aee9d9e6eb8d] : {')
    assert message.count('[aee9d9e6eb8d]') == 1
