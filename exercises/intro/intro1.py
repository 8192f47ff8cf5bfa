# intro1.py
#
# Welcome to pylings! Watch mode re-checks this file every time you save it.
# This one already works: read the output, then delete the marker line below
# to move on to the next exercise. Type 'hint' in watch mode if you get stuck.

# I AM NOT DONE

print("Hello and welcome to pylings!")
print("Delete the `I AM NOT DONE` comment to continue.")
