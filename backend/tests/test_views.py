"""
Tests for the HTTP side of the envelope.

Covers:
- result_view rendering OperationResult returns and passing responses through
- /health answering with a success envelope
- The WSGI entry point serving the same envelope
"""
import json
import os
import sys
from pathlib import Path
from wsgiref.util import setup_testing_defaults

import django

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "opresult.settings")
_backend_dir = str(Path(__file__).resolve().parent.parent)
if _backend_dir not in sys.path:
    sys.path.insert(0, _backend_dir)
django.setup()

from django.http import HttpResponse, HttpResponseNotFound
from django.test import RequestFactory, SimpleTestCase
from django.views.decorators.http import require_http_methods

from api.decorators import result_view
from api.response import OperationResult


# ---------------------------------------------------------------------------
# Views under test
# ---------------------------------------------------------------------------

@result_view
def _order_view(request, order_id):
    """Return an order or a logic error."""
    if order_id <= 0:
        return OperationResult.logic_error("order id must be positive", {"order_id": order_id})
    return OperationResult.success({"id": order_id})


@result_view
def _missing_view(request):
    return HttpResponseNotFound("gone")


@require_http_methods(["POST"])
@result_view
def _cyclic_view(request):
    payload = {}
    payload["self"] = payload
    return OperationResult.failure_with_payload(payload)


# ---------------------------------------------------------------------------
# result_view
# ---------------------------------------------------------------------------

class TestResultView(SimpleTestCase):
    def setUp(self):
        self.factory = RequestFactory()

    def test_success_rendered_as_json(self):
        response = _order_view(self.factory.get("/orders/5"), order_id=5)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], "application/json")
        self.assertEqual(response.content, b'{"r":0,"ro":{"id":5},"ec":0}')

    def test_logic_error_keeps_default_status(self):
        response = _order_view(self.factory.get("/orders/0"), 0)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            json.loads(response.content),
            {"r": 1, "ro": {"order_id": 0}, "em": "order id must be positive", "ec": 0},
        )

    def test_http_response_passes_through(self):
        response = _missing_view(self.factory.get("/missing"))
        self.assertIsInstance(response, HttpResponse)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.content, b"gone")

    def test_unserializable_result_is_500(self):
        with self.assertLogs("api.response", level="ERROR"):
            response = _cyclic_view(self.factory.post("/cyclic"))
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.content, b"Circular reference detected\n")

    def test_method_guard_still_applies(self):
        response = _cyclic_view(self.factory.get("/cyclic"))
        self.assertEqual(response.status_code, 405)

    def test_wraps_preserves_metadata(self):
        self.assertEqual(_order_view.__name__, "_order_view")
        self.assertEqual(_order_view.__doc__, "Return an order or a logic error.")


# ---------------------------------------------------------------------------
# /health
# ---------------------------------------------------------------------------

class TestHealthCheck(SimpleTestCase):
    def test_health_envelope(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], "application/json")
        body = json.loads(response.content)
        self.assertEqual(body, {
            "r": 0,
            "ro": {"status": "ok", "service": "opresult-api", "version": "1.0.0"},
            "ec": 0,
        })
        self.assertTrue(OperationResult.from_json(response.content).is_success())

    def test_health_rejects_post(self):
        response = self.client.post("/health")
        self.assertEqual(response.status_code, 405)

    def test_wsgi_application(self):
        from opresult.wsgi import application

        environ = {"PATH_INFO": "/health", "REQUEST_METHOD": "GET"}
        setup_testing_defaults(environ)
        captured = {}

        def start_response(status, headers, exc_info=None):
            captured["status"] = status
            captured["headers"] = dict(headers)

        body = b"".join(application(environ, start_response))
        self.assertEqual(captured["status"], "200 OK")
        self.assertEqual(captured["headers"]["Content-Type"], "application/json")
        self.assertEqual(json.loads(body)["ro"]["status"], "ok")
