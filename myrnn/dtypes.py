"""
Just a list of dtypes that we care about.
We set them here as strings as we can be using
either cupy or numpy, and Array resolves them
against whichever backend the data lives on.
"""
float16    = "float16"
float32    = "float32"
float64    = "float64"
int32      = "int32"
int64      = "int64"
bool       = "bool"
