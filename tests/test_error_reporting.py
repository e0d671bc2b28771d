import json

from core import error_reporting
from core.domain.recording import TruncatedDataError
from core.error_reporting import ErrorReporter


def _entries(reporter):
    return json.loads(reporter.error_log_path.read_text(encoding='utf-8'))


def test_log_error_writes_entry(tmp_path):
    reporter = ErrorReporter(config_dir=tmp_path)
    assert reporter.log_error(TruncatedDataError(520, 519), "edf_decode", {'file': 'a.edf'})

    (entry,) = _entries(reporter)
    assert entry['error_type'] == 'TruncatedDataError'
    assert entry['context'] == 'edf_decode'
    assert entry['extra_data'] == {'file': 'a.edf'}
    assert entry['app_version']
    assert entry['decode_details'] == {'expected_bytes': 520, 'actual_bytes': 519}


def test_duplicates_are_counted_not_logged(tmp_path):
    reporter = ErrorReporter(config_dir=tmp_path)
    err = ValueError("same thing")
    assert reporter.log_error(err)
    assert not reporter.log_error(ValueError("same thing"))

    assert len(_entries(reporter)) == 1
    assert reporter.get_error_count() == 1
    assert reporter.get_error_summary() == {'ValueError:same thing': 2}


def test_session_rate_limit(tmp_path):
    reporter = ErrorReporter(config_dir=tmp_path)
    for i in range(error_reporting.MAX_ERRORS_PER_SESSION + 5):
        reporter.log_error(ValueError(f"error {i}"))
    assert reporter.get_error_count() == error_reporting.MAX_ERRORS_PER_SESSION
    assert not reporter.log_error(RuntimeError("one more"))


def test_log_is_trimmed(tmp_path):
    path = tmp_path / error_reporting.ERROR_LOG_FILE
    path.write_text(json.dumps([{'n': i} for i in range(error_reporting.MAX_ERROR_LOG_ENTRIES)]))

    reporter = ErrorReporter(config_dir=tmp_path)
    reporter.log_error(ValueError("new"))
    entries = _entries(reporter)
    assert len(entries) == error_reporting.MAX_ERROR_LOG_ENTRIES
    assert entries[0] == {'n': 1}
    assert entries[-1]['error_message'] == 'new'


def test_corrupt_log_is_replaced(tmp_path):
    (tmp_path / error_reporting.ERROR_LOG_FILE).write_text("garbage")
    reporter = ErrorReporter(config_dir=tmp_path)
    reporter.log_error(ValueError("x"))
    assert len(_entries(reporter)) == 1
