"""
GreenThumb Backend - Services Layer
====================================

What:  Business rules between the routes (HTTP) and the persistence layer.
How:   Stateless service singletons; each call receives the request's
       AsyncSession and builds a DatabaseInterface on it.

Service Inventory:
    - DatabaseInterface: named persistence operations
    - PlantClassifier (abstract) / RemoteClassifier: ML identification client
    - PhotoService, ReportService, PlantService, UserService, MLModelService
    - access: admin and ban guards shared by the services
"""
