"""logic — Battle systems package.

Subpackages
-----------
combat/     — interaction dispatch, combat resolution, parry, strikes, targeting

Top-level modules
-----------------
rules           — Condition / Motion / Action / Stance + the Rulebook
repertoire      — built-in catalog (``default_rulebook``) and motion executors
conditions      — condition handlers
calls           — the call catalog
decision        — Stance → Action → Motion decision engine
tick            — per-frame system orchestrator
movement        — locomotion intents and physics step
teams           — team membership and relationships
landmarks       — respawn-point waiting areas
entity_factory  — unit and landmark construction
"""
