"""
Service layer.

Each module groups the `@transactional` operations of one area:

- users          teams, accounts, approval queue, login, departments, presence
- chat           rooms, memberships, messages, seen receipts
- notes          versioned project notes
- projects       projects, phases, assignments, status history
- notifications  in-app notifications and deadline alert collection
- dashboard      team counters and recent projects

Call these functions with keyword arguments; the decorator injects `session`.
"""
