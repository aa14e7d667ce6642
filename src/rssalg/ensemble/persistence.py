"""
Saving and loading ensemble statistics.

Recording the statistics takes one full co-training run per feature split,
so experiments persist them and re-run only the threshold optimization.
The file is JSON:

    {
      "class_names": ["A", "B"],
      "ensembles": [
        {"id": 0, "instance_ids": [3, 7], "confidences": [[0.9, 0.1], [0.2, 0.8]]},
        ...
      ]
    }

Confidences of one ensemble follow the order of its id list. Python floats
serialize with their shortest round-tripping repr, so a loaded set is
value-for-value identical to the one written.
"""

import json
import numbers
from pathlib import Path
from typing import Union

from ..exceptions import PersistenceError
from .confidence import ConfidenceVector
from .statistics import EnsembleRecord, EnsembleRecordSet

PathLike = Union[str, Path]


def _json_id(instance_id):
    # numpy integers are not JSON serializable
    if isinstance(instance_id, numbers.Integral):
        return int(instance_id)
    return instance_id


def statistics_to_dict(statistics: EnsembleRecordSet) -> dict:
    """Plain-dict form of an EnsembleRecordSet."""
    ensembles = []
    for record in statistics.records:
        ids = record.ids()
        ensembles.append({
            'id': record.record_id,
            'instance_ids': [_json_id(i) for i in ids],
            'confidences': [record.prediction(i).tolist() for i in ids],
        })
    return {'class_names': list(statistics.class_names), 'ensembles': ensembles}


def statistics_from_dict(payload: dict) -> EnsembleRecordSet:
    """
    Rebuild an EnsembleRecordSet from its plain-dict form.

    Raises:
        KeyError / ValueError / TypeError: If the payload is malformed
    """
    class_names = payload['class_names']
    n_classes = len(class_names)
    statistics = EnsembleRecordSet(class_names)
    for entry in payload['ensembles']:
        ids = entry['instance_ids']
        confidences = entry['confidences']
        if len(ids) != len(confidences):
            raise ValueError(
                f"Ensemble {entry['id']} lists {len(ids)} ids but "
                f"{len(confidences)} confidence vectors"
            )
        record = EnsembleRecord(record_id=entry['id'])
        for instance_id, values in zip(ids, confidences):
            record.add_prediction(instance_id, ConfidenceVector(values, n_classes))
        statistics.add_record(record)
    return statistics


def save_statistics(statistics: EnsembleRecordSet, path: PathLike):
    """
    Write ensemble statistics to a JSON file.

    Raises:
        PersistenceError: If an id is not JSON serializable or the file
            cannot be written
    """
    path = Path(path)
    # serialize first so a bad id never leaves a partly written file
    try:
        text = json.dumps(statistics_to_dict(statistics), indent=2)
    except (TypeError, ValueError) as exc:
        raise PersistenceError(path, f"Ensemble statistics are not JSON serializable ({exc})") from exc
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            f.write(text)
    except OSError as exc:
        raise PersistenceError(path, f"Could not write ensemble statistics ({exc})") from exc


def load_statistics(path: PathLike) -> EnsembleRecordSet:
    """
    Read ensemble statistics written by save_statistics().

    Raises:
        PersistenceError: If the file is missing or malformed
    """
    path = Path(path)
    try:
        with open(path) as f:
            payload = json.load(f)
    except OSError as exc:
        raise PersistenceError(path, f"Could not read ensemble statistics ({exc})") from exc
    except json.JSONDecodeError as exc:
        raise PersistenceError(path, f"Malformed ensemble statistics file ({exc})") from exc

    try:
        return statistics_from_dict(payload)
    except (KeyError, ValueError, TypeError) as exc:
        raise PersistenceError(path, f"Malformed ensemble statistics file ({exc!r})") from exc
