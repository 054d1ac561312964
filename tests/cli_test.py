import io
import pytest
from leaklog import main, __version__
from leaklog._cli import analyse

LOG = """# PID 77
+ malloc 2048 0x1000 77 77
+ malloc 16 0x2000 77 77
+ free 16 0x2000 77 77
+ free 8 0x3000 77 77
+ free 8 0x3000 77 77
+ mmap 4096 0x4000 77 77
"""


def test_main_writes_report_to_stdout(tmp_path, capsys):
    log = tmp_path / 'alloc.log'
    log.write_text(LOG, encoding='latin-1')

    assert main(['-l', '40', str(log)]) == 0

    out = capsys.readouterr().out
    lines = out.splitlines()
    assert lines[1] == 'Allocation balance (bytes, negative means leak): -2,048'
    assert lines[2] == 'Number of objects allocated in log session but not freed yet: 1'
    assert lines[4] == 'Number of objects freed in session but not allocated in session: 2 without multiple frees: 1'
    assert lines[5] == 'Matching alloc/free pairs through the logging session (n, bytes): 1 16'
    assert out.endswith('\nallocator: malloc\n\tN:1 BYTES: 2,048\n+ malloc 2048 0x1000 77 77\n')
    assert 'freed twice' not in out
    assert 'unknown entry' not in out


def test_main_reads_stdin(monkeypatch, capsys):
    monkeypatch.setattr('sys.stdin', io.StringIO(LOG))

    assert main(['-l', '40']) == 0
    assert 'allocator: malloc' in capsys.readouterr().out


def test_stdin_bytes_are_read_as_latin1(monkeypatch, capsys):
    raw = b'+ malloc 16 0x10 1 1\n./demo(\xe9t\xe9+0x1)[0x1]\n-\n'
    monkeypatch.setattr('sys.stdin', io.TextIOWrapper(io.BytesIO(raw), encoding='utf-8', errors='strict'))

    assert main(['-l', '40']) == 0
    out = capsys.readouterr().out
    assert '\nallocator: ./demo(\xe9t\xe9+0x1)[0x1]\n\tN:1 BYTES: 16\n' in out
    assert out.endswith('+ malloc 16 0x10 1 1\n\t./demo(\xe9t\xe9+0x1)[0x1]\n')


def test_missing_file_is_a_usage_error(tmp_path, capsys):
    with pytest.raises(SystemExit) as e:
        main([str(tmp_path / 'missing.log')])

    assert e.value.code == 2
    assert "can't open" in capsys.readouterr().err


def test_version(capsys):
    with pytest.raises(SystemExit) as e:
        main(['--version'])

    assert e.value.code == 0
    assert capsys.readouterr().out.strip() == 'leaklog ' + __version__


def test_analyse_logs_metadata_and_diagnostics(caplog):
    out = io.StringIO()
    with caplog.at_level('INFO'):
        matcher = analyse(io.StringIO(LOG + '+ free 0 (nil) 77 77\n'), out)

    messages = [r.getMessage() for r in caplog.records]
    assert 'PID 77' in messages
    assert 'Read 8 lines, 6 entries, skipped 1 null frees' in messages
    assert sum(m.startswith('Memory freed twice: ') for m in messages) == 1
    assert sum(m.startswith('unknown entry: + mmap 4096 0x4000 77 77') for m in messages) == 1
    assert matcher.state.balance == -2048
    assert out.getvalue().startswith('Processing timespan in millis')
