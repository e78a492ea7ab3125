# Schemas package init
"""
GreenThumb Backend - Pydantic Request/Response Schemas
=======================================================

What:  The API contract. Request models are parsed once per request and are
       immutable; defaults (such as maxPhotos) are resolved in the model.
       Response models are the JSON projections of the ORM records.
How:   All JSON keys are camelCase (`userId`, `uploadDate`) via a shared
       alias generator; Python code uses snake_case attribute names.
"""
