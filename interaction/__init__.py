"""Tap interaction with anchored cards."""

from .hit_test import CardHit, CardProjection, HitPolicy, TapHitTester, project_card

__all__ = ["CardHit", "CardProjection", "HitPolicy", "TapHitTester", "project_card"]
