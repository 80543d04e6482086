"""Pipeline stages — connections, placer, router, scoring, drc.

Each stage takes plain design dataclasses and returns new ones; no stage
keeps state between calls.  The stages in order:

  connections   — infer power / ground / analog nets from pad roles
  placer        — candidate placements, one per strategy
  router        — grid A* channels between connected pads
  scoring       — score and rank routed arrangements
  drc           — manufacturability checks on an accepted design

``arrangements`` runs placer, router and scoring end to end.
"""
