"""logic/combat — Combat subpackage.

Modules
-------
interaction  — InteractionPayload / InteractionResult + ``interact()`` dispatcher
damage       — receive_interaction(), die() and respawn()
parry        — parry-rate bounds, recovery, wear and guard lowering
attacks      — strike(), reach check and scheduled strike phases
targeting    — nearest unit / enemy / landmark queries
"""
