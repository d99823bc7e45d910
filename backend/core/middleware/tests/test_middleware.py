"""
Tests for the audit log middleware.
"""

import logging

import pytest
from django.http import HttpResponse
from django.test import RequestFactory

from core.middleware.audit_log import AuditLogMiddleware


@pytest.mark.unit
class TestAuditLogMiddleware:
    def setup_method(self):
        self.factory = RequestFactory()
        self.middleware = AuditLogMiddleware(lambda request: HttpResponse(status=201))

    def test_logs_api_request_with_client_ip(self, caplog):
        request = self.factory.post("/api/vote", HTTP_X_FORWARDED_FOR="203.0.113.7, 10.0.0.1")

        with caplog.at_level(logging.INFO, logger="onevote.audit"):
            response = self.middleware(request)

        assert response.status_code == 201
        assert "POST /api/vote from 203.0.113.7 status 201" in caplog.text

    def test_skips_admin_and_static(self, caplog):
        with caplog.at_level(logging.INFO, logger="onevote.audit"):
            self.middleware(self.factory.get("/admin/"))
            self.middleware(self.factory.get("/static/app.js"))

        assert caplog.text == ""
