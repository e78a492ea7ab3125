"""
GreenThumb Backend - API Routes Package
========================================

Route Inventory (all resource routes are POST with a JSON body):
    - photos.py:         /photos/add, /byId, /remove, /list/byDate,
                         /list/byRating, /vote
    - photo_reports.py:  /photoReports/add, /byId, /handle, /list/byDate, /remove
    - plants.py:         /plants/add, /byId, /byImage, /byQuery, /update, /remove
    - ml_model.py:       /mlModel/training/immediate
    - users.py:          /users/add, /byId, /ban, /makeAdmin, /remove
    - health.py:         GET /health

Routes stay thin: parse the body, call the service, return its result.
"""
