"""
Lambda handler that generates a corpus and uploads it to S3.
"""
import json
import logging

from corpus_gen.generators import build_generator, render_corpus, stream_corpus
from corpus_gen.metrics import create_run_metrics, now_ms, print_emf
from corpus_gen.s3_uploader import calculate_multipart_stats, multipart_upload_stream, put_single_object
from corpus_gen.settings import Settings
from corpus_gen.util import corpus_key, get_function_name, get_region, get_run_id

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def _fits_single_object(settings: Settings) -> bool:
    if not settings.tot_size:
        return False
    stats = calculate_multipart_stats(settings.tot_size, settings.multipart_mb)
    return stats['total_parts'] <= 1


def handler(event, context):
    """
    Main Lambda handler function.

    Args:
        event: Lambda event (can contain {"run_id": "<uuid>"})
        context: Lambda context

    Returns:
        JSON-serializable summary of the run
    """
    ts_start_ms = now_ms()
    settings = None

    run_id = event.get('run_id', '') if isinstance(event, dict) else ''
    if not run_id:
        run_id = get_run_id()

    region = get_region()
    function_name = get_function_name()

    try:
        settings = Settings.from_env()
        settings.validate()
        settings.validate_output()

        s3_key = corpus_key(settings.key_prefix, run_id, settings.template_type)

        with build_generator(settings) as gen:
            if _fits_single_object(settings):
                corpus = render_corpus(gen, settings.tot_events)
                put_single_object(
                    bucket=settings.output_bucket,
                    key=s3_key,
                    data=corpus,
                    region=region
                )
                corpus_bytes = len(corpus)
                parts_uploaded = 1
            else:
                corpus_bytes = 0

                def counted(chunks):
                    nonlocal corpus_bytes
                    for chunk in chunks:
                        corpus_bytes += len(chunk)
                        yield chunk

                chunk_bytes = settings.multipart_mb * 1024 * 1024
                upload = multipart_upload_stream(
                    bucket=settings.output_bucket,
                    key=s3_key,
                    chunks=counted(stream_corpus(gen, chunk_bytes, settings.tot_events)),
                    part_size_mb=settings.multipart_mb,
                    region=region
                )
                parts_uploaded = upload['Parts']

            events_generated = gen.state.counter

        ts_end_ms = now_ms()

        print_emf(**create_run_metrics(
            ts_start_ms=ts_start_ms,
            ts_end_ms=ts_end_ms,
            template_type=settings.template_type,
            run_id=run_id,
            function_name=function_name,
            region=region,
            tot_size=settings.tot_size,
            tot_events=settings.tot_events,
            events_generated=events_generated,
            corpus_bytes=corpus_bytes,
            parts_uploaded=parts_uploaded,
            s3_bucket=settings.output_bucket,
            s3_key=s3_key
        ))

        return {
            'ok': True,
            'run_id': run_id,
            'latency_ms': ts_end_ms - ts_start_ms,
            's3_key': s3_key,
            'corpus_bytes': corpus_bytes,
            'events_generated': events_generated,
            'parts_uploaded': parts_uploaded
        }

    except Exception as e:
        ts_end_ms = now_ms()

        error_metrics = create_run_metrics(
            ts_start_ms=ts_start_ms,
            ts_end_ms=ts_end_ms,
            template_type=getattr(settings, 'template_type', 'unknown'),
            run_id=run_id,
            function_name=function_name,
            region=region,
            tot_size=getattr(settings, 'tot_size', 0),
            tot_events=getattr(settings, 'tot_events', 0),
            events_generated=0,
            corpus_bytes=0,
            parts_uploaded=0,
            s3_bucket=getattr(settings, 'output_bucket', ''),
            s3_key=''
        )
        error_metrics['error'] = str(e)
        print_emf(**error_metrics)

        logger.error("corpus generation failed for run %s: %s", run_id, e)
        raise


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='[corpus-gen] %(message)s')
    result = handler({}, None)
    print(f"Result: {json.dumps(result, indent=2)}")
