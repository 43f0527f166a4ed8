"""
Security headers added to every response, in the spirit of helmet's defaults:

- X-Frame-Options, X-Content-Type-Options, Referrer-Policy
- Content-Security-Policy (skipped for the Swagger UI, which needs inline assets)
- Strict-Transport-Security in production only
- Cross-Origin-Resource-Policy, relaxed for served uploads so the frontend can embed photos
"""
import logging

from flask import request

logger = logging.getLogger(__name__)

DOCS_PATH_PREFIXES = ('/api/docs', '/swaggerui', '/api/swagger.json')
UPLOADS_PATH_PREFIX = '/api/uploads/'

CSP_DIRECTIVES = [
    "default-src 'self'",
    "base-uri 'self'",
    "font-src 'self' https: data:",
    "form-action 'self'",
    "frame-ancestors 'self'",
    "img-src 'self' data:",
    "object-src 'none'",
    "script-src 'self'",
    "style-src 'self' https: 'unsafe-inline'",
]


def get_csp_policy():
    return '; '.join(CSP_DIRECTIVES)


def setup_security_headers(app):
    production = app.config.get('APP_ENV') == 'production'
    csp_policy = get_csp_policy()

    @app.after_request
    def add_security_headers(response):
        path = request.path
        response.headers.setdefault('X-Frame-Options', 'SAMEORIGIN')
        response.headers.setdefault('X-Content-Type-Options', 'nosniff')
        response.headers.setdefault('Referrer-Policy', 'no-referrer')
        response.headers.setdefault('X-DNS-Prefetch-Control', 'off')

        if path.startswith(UPLOADS_PATH_PREFIX):
            response.headers['Cross-Origin-Resource-Policy'] = 'cross-origin'
        else:
            response.headers.setdefault('Cross-Origin-Resource-Policy', 'same-origin')

        if not path.startswith(DOCS_PATH_PREFIXES):
            response.headers.setdefault('Content-Security-Policy', csp_policy)

        if production:
            response.headers.setdefault('Strict-Transport-Security', 'max-age=15552000; includeSubDomains')
        return response

    logger.debug('Security headers enabled')
