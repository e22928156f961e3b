import click


from cli.batch import batch
from cli.compare import compare
from cli.decode_error import decode_error
from cli.list_functions import list_functions
from cli.simulate import simulate


@click.group()
@click.version_option(version="1.0.0")
@click.pass_context
def cli(ctx):
    pass


# Single call simulation
cli.add_command(simulate, "simulate")

# Gas comparison across parameter sets
cli.add_command(compare, "compare")

# Sequential batch simulation
cli.add_command(batch, "batch")

# Registered contract functions
cli.add_command(list_functions, "list_functions")

# Offline error decoding
cli.add_command(decode_error, "decode_error")
