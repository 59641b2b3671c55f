"""Ship workflow: plan a release, then run its phases and hooks.

Entry points live in ``scrat.ship.plan`` (``plan_ship``/``ReadyShip``); the
phase machine itself is in ``scrat.ship.orchestrator``.
"""
