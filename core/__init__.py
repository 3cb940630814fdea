"""
Core domain logic

- Turn Sequencer: who is on the clock
- Roster Manager: the persisted draft order
- Claim Arbiter: drafting a game, at most one winner per game
- Room Store / Notifier: persistence and invalidation signals
- Room Manager: join flow and board snapshot
"""
