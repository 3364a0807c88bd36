"""
Metrics utilities for CloudWatch Embedded Metric Format (EMF).
"""
import json
import time
from typing import Any, Dict

NAMESPACE = "CorpusGenerator"


def now_ms() -> int:
    """Get current timestamp in milliseconds."""
    return int(time.time() * 1000)


def emf_log(**fields: Any) -> str:
    """
    Create a CloudWatch Embedded Metric Format log line.

    Args:
        **fields: Metric fields to include

    Returns:
        EMF-formatted JSON string
    """
    emf_data = {
        "_aws": {
            "CloudWatchMetrics": [
                {
                    "Namespace": NAMESPACE,
                    "Dimensions": [
                        ["template_type", "function_name", "region"]
                    ],
                    "Metrics": [
                        {"Name": "latency_ms", "Unit": "Milliseconds"},
                        {"Name": "corpus_bytes", "Unit": "Bytes"},
                        {"Name": "events_generated", "Unit": "Count"},
                        {"Name": "parts_uploaded", "Unit": "Count"}
                    ]
                }
            ],
            "Timestamp": fields.get('ts_start_ms', now_ms())
        }
    }

    for key, value in fields.items():
        emf_data[key] = value

    return json.dumps(emf_data, separators=(',', ':'))


def print_emf(**fields: Any) -> None:
    """Print an EMF-formatted log line to stdout."""
    print(emf_log(**fields))


def create_run_metrics(
    ts_start_ms: int,
    ts_end_ms: int,
    template_type: str,
    run_id: str,
    function_name: str,
    region: str,
    tot_size: int,
    tot_events: int,
    events_generated: int,
    corpus_bytes: int,
    parts_uploaded: int,
    s3_bucket: str,
    s3_key: str
) -> Dict[str, Any]:
    """
    Create the metrics recorded for one generation run.

    Returns:
        Dictionary with all required metrics
    """
    return {
        'ts_start_ms': ts_start_ms,
        'ts_end_ms': ts_end_ms,
        'latency_ms': ts_end_ms - ts_start_ms,
        'template_type': template_type,
        'run_id': run_id,
        'function_name': function_name,
        'region': region,
        'tot_size': tot_size,
        'tot_events': tot_events,
        'events_generated': events_generated,
        'corpus_bytes': corpus_bytes,
        'parts_uploaded': parts_uploaded,
        's3_bucket': s3_bucket,
        's3_key': s3_key
    }
