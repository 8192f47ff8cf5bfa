# variables1.py
#
# Make me compile!

# I AM NOT DONE

x 5
print(f"x has the value {x}")
