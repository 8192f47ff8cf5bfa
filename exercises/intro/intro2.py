# intro2.py
#
# Make the code print a greeting to the world.

# I AM NOT DONE

print("Hello {}!".format())
