from typing import Optional

import click

from simulation.service.error_decoder_service import ErrorDecoderService
from utils.file_utils import write_json


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.argument("message", type=str)
@click.option("-d", "--data", default=None, type=str, help="Raw revert data (0x...) returned by the node.")
@click.option("-o", "--output", default="-", show_default=True, type=str, help="Output file, '-' for stdout.")
def decode_error(message: str, data: Optional[str], output: str):
    """Decodes a node error message or revert payload into a readable error."""
    decoded = ErrorDecoderService.decode(message, data)
    payload = decoded.model_dump(mode="json")
    payload["display"] = ErrorDecoderService.format_for_display(decoded)
    payload["hypothetical_success"] = ErrorDecoderService.is_hypothetical_success(
        " ".join(part for part in (message, data, decoded.decoded_message) if part)
    )
    write_json(payload, output)
