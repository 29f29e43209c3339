"""
Waypoint API: Backend Package
=============================

Bootstrap and configuration layer of the Waypoint HTTP API.

    ┌─────────────────────────────────────┐
    │    main (factory + listener)        │  ← create_app(), run()
    ├─────────────────────────────────────┤
    │    routes / dependencies            │  ← namespaces looked up by name
    ├─────────────────────────────────────┤
    │    middleware                       │  ← headers, CORS, logging, limits
    ├─────────────────────────────────────┤
    │    config                           │  ← snapshot → validate → project
    └─────────────────────────────────────┘

Configuration is validated once; every layer above `config` only ever sees
typed, immutable namespace records.
"""

__version__ = "1.0.0"
