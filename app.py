#!/usr/bin/env python3
"""
Flask Web Application for Transaction Aggregate Analyzer
Provides REST API endpoints deriving chart series and merged summaries from an
uploaded aggregate export file.
"""

from flask import Flask, request, jsonify
from werkzeug.utils import secure_filename
import os
import tempfile
from transaction_analyzer import TransactionAnalyzer, InvalidInputError
from transaction_analyzer.web import (
    iter_json,
    prepare_flame_graph_results,
    prepare_overview_results,
    prepare_percentile_results,
    prepare_profile_results,
    prepare_query_results,
)

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = 500 * 1024 * 1024
app.config['UPLOAD_FOLDER'] = tempfile.gettempdir()

ALLOWED_EXTENSIONS = {'json'}

analyzer = TransactionAnalyzer()


def allowed_file(filename):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def json_response(results):
    """Encode a result document without recursing on nested profile trees."""
    return app.response_class(iter_json(results), mimetype='application/json')


def load_uploaded_export():
    """
    Save the uploaded export file, parse it and remove it.

    Returns:
        Tuple of (export, error_response); exactly one is None
    """
    if 'file' not in request.files:
        return None, (jsonify({'error': 'No file provided'}), 400)

    file = request.files['file']

    if not file.filename:
        return None, (jsonify({'error': 'No file selected'}), 400)

    if not allowed_file(file.filename):
        return None, (jsonify({'error': 'Invalid file type. Only JSON files are allowed.'}), 400)

    fd, filepath = tempfile.mkstemp(prefix=secure_filename(file.filename) + '-', suffix='.json',
                                    dir=app.config['UPLOAD_FOLDER'])
    os.close(fd)
    try:
        file.save(filepath)
        export = analyzer.process_export_file(filepath)
    finally:
        os.remove(filepath)
    return export, None


def window_from_request(export):
    """Read 'from'/'to'/'live_capture_time' form overrides, falling back to the export."""
    window_from = int(request.form.get('from', export.window_from))
    window_to = int(request.form.get('to', export.window_to))
    live_capture_time = request.form.get('live_capture_time')
    if live_capture_time is not None:
        live_capture_time = int(live_capture_time)
    return window_from, window_to, live_capture_time


@app.errorhandler(InvalidInputError)
def handle_invalid_input(e):
    return jsonify({'error': str(e)}), 400


@app.route('/backend/transaction/average', methods=['POST'])
def overview_api():
    """
    Stacked timer chart and merged timer breakdown.
    Accepts: multipart/form-data with fields:
      - 'file': aggregate export JSON file
      - 'from', 'to': window override in epoch milliseconds (optional)
      - 'live_capture_time': "now" of the request in epoch milliseconds (optional)
    Returns: JSON with dataSeries, transactionCounts, mergedAggregate
    """
    try:
        export, error = load_uploaded_export()
        if error:
            return error
        window_from, window_to, live_capture_time = window_from_request(export)
        view = analyzer.overview(export.overview_samples, window_from, window_to,
                                 export.interval_millis, live_capture_time)
        return json_response(prepare_overview_results(view, analyzer.config.micros_per_milli))
    except InvalidInputError:
        raise
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        return jsonify({'error': str(e)}), 500


@app.route('/backend/transaction/percentiles', methods=['POST'])
def percentiles_api():
    """
    Percentile chart and merged percentile values.
    Accepts: multipart/form-data with fields:
      - 'file': aggregate export JSON file
      - 'percentile': fraction in [0, 1], repeatable (optional, default: configured)
      - 'from', 'to', 'live_capture_time': as for /backend/transaction/average
    Returns: JSON with dataSeries, transactionCounts, mergedAggregate
    """
    try:
        export, error = load_uploaded_export()
        if error:
            return error
        window_from, window_to, live_capture_time = window_from_request(export)
        percentiles = [float(p) for p in request.form.getlist('percentile')]
        view = analyzer.percentiles(export.percentile_samples, window_from, window_to,
                                    export.interval_millis, percentiles, live_capture_time)
        return json_response(prepare_percentile_results(view))
    except InvalidInputError:
        raise
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        return jsonify({'error': str(e)}), 500


@app.route('/backend/transaction/profile', methods=['POST'])
def profile_api():
    """
    Merged profile tree.
    Accepts: multipart/form-data with 'file' and repeatable 'include'/'exclude' fields
    Returns: JSON profile tree, or {"overwritten": true}
    """
    try:
        export, error = load_uploaded_export()
        if error:
            return error
        include = request.form.getlist('include')
        exclude = request.form.getlist('exclude')
        profile = analyzer.profile(export.profile, include, exclude)
        return json_response(prepare_profile_results(profile, bool(include or exclude),
                                                     export.should_have_profile))
    except InvalidInputError:
        raise
    except Exception as e:
        return jsonify({'error': str(e)}), 500


@app.route('/backend/transaction/flame-graph', methods=['POST'])
def flame_graph_api():
    """
    Flame graph of the merged profile.
    Accepts: multipart/form-data with 'file' and repeatable 'include'/'exclude' fields
    Returns: JSON flame graph keyed by frame label
    """
    try:
        export, error = load_uploaded_export()
        if error:
            return error
        flame_graph = analyzer.flame_graph(export.profile, request.form.getlist('include'),
                                           request.form.getlist('exclude'))
        return json_response(prepare_flame_graph_results(flame_graph))
    except InvalidInputError:
        raise
    except Exception as e:
        return jsonify({'error': str(e)}), 500


@app.route('/backend/transaction/queries', methods=['POST'])
def queries_api():
    """
    Merged query statistics.
    Accepts: multipart/form-data with 'file'
    Returns: JSON list sorted by total time, or {"overwritten": true}
    """
    try:
        export, error = load_uploaded_export()
        if error:
            return error
        queries = analyzer.queries(export.queries)
        return json_response(prepare_query_results(queries, export.should_have_queries))
    except InvalidInputError:
        raise
    except Exception as e:
        return jsonify({'error': str(e)}), 500


if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=5001)
