"""State/store layer.

The store owns the persisted per-device state; the policy decides, from the
previous state and the freshly normalized device, whether an alert fires.
"""
