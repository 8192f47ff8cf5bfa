# variables2.py
#
# Make the script run without errors.

# I AM NOT DONE

if x == 10:
    print("x is ten!")
else:
    print("x is not ten!")
