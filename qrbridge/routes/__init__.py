"""
QR Bridge — API Routes Package
================================

Route Inventory:
    - qr.py:      POST /api/qr/generate     (record → QR PNG download)
                  POST /api/qr/read         (QR image upload → record)
    - health.py:  GET  /health              (service health check)

Routes are thin: they build the sink/upload, call TranscodingService and
format the response. Errors are formatted by the handlers in main.py.
"""
