from datetime import datetime, timezone
import json

import pytest

from jsonmetrics.metric.emit import (
    emit_metrics_jsonl,
    metric_to_dict,
    metrics_to_frame,
    to_line_protocol,
    unix_nanos,
)
from jsonmetrics.metric.types import Metric

T = datetime.fromtimestamp(3600, tz=timezone.utc)


def _metric(**fields):
    return Metric(name="file", fields=fields, time=T)


def test_metric_to_dict():
    d = metric_to_dict(_metric(a=1, b="x"))
    assert d == {
        "name": "file",
        "tags": {},
        "fields": {"a": 1, "b": "x"},
        "timestamp": "1970-01-01T01:00:00+00:00",
    }


def test_emit_jsonl(tmp_path):
    out = tmp_path / "out" / "metrics.jsonl"
    emit_metrics_jsonl([_metric(a=1), _metric(a=2)], out)
    lines = out.read_text(encoding="utf-8").splitlines()
    assert [json.loads(s)["fields"]["a"] for s in lines] == [1, 2]


def test_emit_jsonl_dry_run(tmp_path):
    out = tmp_path / "metrics.jsonl"
    text = emit_metrics_jsonl([_metric(a=1)], out, dry_run=True)
    assert text.endswith("\n")
    assert not out.exists()
    assert emit_metrics_jsonl([], out, dry_run=True) == ""


def test_unix_nanos():
    assert unix_nanos(T) == 3_600_000_000_000
    assert unix_nanos(datetime(1970, 1, 1, 0, 0, 1, 500)) == 1_000_500_000


def test_line_protocol_value_types():
    line = to_line_protocol(_metric(s="Bilbo", i=1, f=1.5, b=True))
    assert line == 'file b=true,f=1.5,i=1i,s="Bilbo" 3600000000000'


def test_line_protocol_escaping():
    m = Metric(
        name="my metric,x",
        tags={"host name": "a=b"},
        fields={"k,=": 'say "hi"'},
        time=T,
    )
    assert to_line_protocol(m) == (
        'my\\ metric\\,x,host\\ name=a\\=b k\\,\\==\"say \\"hi\\"\" 3600000000000'
    )


def test_line_protocol_requires_fields():
    with pytest.raises(ValueError, match="no fields"):
        to_line_protocol(_metric())


def test_metrics_to_frame():
    df = metrics_to_frame([_metric(a=1, b="x"), _metric(a=2, b="y")])
    assert list(df.columns) == ["name", "timestamp", "fields.a", "fields.b"]
    assert df["fields.a"].tolist() == [1, 2]
    assert len(df) == 2


def test_metrics_to_frame_field_named_like_a_column():
    m = Metric(name="file", fields={"name": "John", "timestamp": 5}, time=T)
    df = metrics_to_frame([m])
    row = df.iloc[0]
    assert row["name"] == "file"
    assert row["timestamp"] == "1970-01-01T01:00:00+00:00"
    assert row["fields.name"] == "John"
    assert row["fields.timestamp"] == 5
