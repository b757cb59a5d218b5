# Routes package init
"""
Card Activation Backend — API Routes Package
==============================================

Route Inventory:
    - activation.py:  POST /validate-digits        (digit check, no storage)
                      POST /activate               (validate and store)
    - admin.py:       POST /admin/login            (issue bearer token)
                      POST /admin/update-fees      (replace fee ledger, bearer)
    - payments.py:    GET  /api/payments           (public fee list)
    - health.py:      GET  /health                 (database probe)

Routes stay thin: extract request data, call a service, return its result.
"""
