from unistore import create_action

# ====== Actions ======
incremented = create_action("counter/incremented")
decremented = create_action("counter/decremented")
incremented_by_amount = create_action("counter/incrementedByAmount", lambda amount: amount)
