from __future__ import annotations
import json
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Iterable, List, Optional

from models.records import SampleRecord
from settings import get_settings

DEFAULT_SAMPLES = (
    SampleRecord(date="Jan", temperature=3.1415),
    SampleRecord(date="Feb", temperature=4.2071),
    SampleRecord(date="Mar", temperature=8.5549),
    SampleRecord(date="Apr", temperature=12.9981),
    SampleRecord(date="May", temperature=17.3012),
    SampleRecord(date="Jun", temperature=20.6667),
    SampleRecord(date="Jul", temperature=22.4449),
    SampleRecord(date="Aug", temperature=22.0051),
    SampleRecord(date="Sep", temperature=18.2396),
    SampleRecord(date="Oct", temperature=12.8888),
    SampleRecord(date="Nov", temperature=7.4502),
    SampleRecord(date="Dec", temperature=4.0004),
)


class DataLog:
    """Append-only temperature log kept by the mock device."""

    def __init__(
        self,
        samples: Iterable[SampleRecord] = (),
        persistence_path: Optional[Path] = None,
    ) -> None:
        self._samples: List[SampleRecord] = list(samples)
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def append(self, sample: SampleRecord) -> None:
        with self._lock:
            self._samples.append(sample)
            self._persist()

    def samples(self) -> list[SampleRecord]:
        with self._lock:
            return list(self._samples)

    def clear(self) -> int:
        with self._lock:
            removed = len(self._samples)
            self._samples.clear()
            self._persist()
            return removed

    def to_payload(self) -> dict[str, list[dict[str, object]]]:
        return {
            "data": [
                {"date": sample.date, "temperature": sample.temperature}
                for sample in self.samples()
            ]
        }

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = [
            {"date": sample.date, "temperature": sample.temperature} for sample in self._samples
        ]
        self.persistence_path.write_text(json.dumps(payload, indent=2))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "[]"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            data = []

        self._samples = [
            SampleRecord(date=str(item["date"]), temperature=float(item["temperature"]))
            for item in data
            if isinstance(item, dict) and "date" in item and "temperature" in item
        ]


@lru_cache
def build_default_datalog(path: Optional[str] = None) -> DataLog:
    settings = get_settings()
    log_path = settings.datalog_path if path is None else path
    if log_path:
        return DataLog(persistence_path=Path(log_path))
    return DataLog(samples=DEFAULT_SAMPLES)
