# Services package init
"""
Card Activation Backend — Services Layer
==========================================

Service Inventory:
    - validation:          pure field validators (digits, limit, currency, PIN, fees)
    - ActivationService:   ordered activation validation + single insert
    - FeeLedgerService:    replace / list / seed the four fee line items
    - AdminCredentialService: seed the first admin, verify logins
    - SessionService:      issue and verify signed admin bearer tokens

Services take an AsyncSession per call and never touch the HTTP request.
"""
