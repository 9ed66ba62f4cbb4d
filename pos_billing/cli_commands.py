"""
Flask CLI commands.

Commands:
- flask recompute-totals FILE: re-derive the totals of a saved cart
"""

import json
import click

from pos_billing.models import Cart
from pos_billing.services.cart_totals_service import aggregate, totals_to_dict


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('recompute-totals')
    @click.argument('cart_file', type=click.File('r', encoding='utf-8'))
    @click.option('--as-json', is_flag=True, help='Print the totals as JSON')
    def recompute_totals(cart_file, as_json):
        """Recompute the totals of a cart saved as JSON (audit check)."""
        try:
            data = json.load(cart_file)
        except json.JSONDecodeError as e:
            raise click.ClickException(f'Invalid JSON: {e}')

        if not isinstance(data, dict):
            raise click.ClickException('Invalid cart data: expected a JSON object')

        try:
            cart = Cart.from_dict(data.get('cart', data))
        except (KeyError, ValueError, TypeError, AttributeError, ArithmeticError) as e:
            raise click.ClickException(f'Invalid cart data: {e}')

        result = totals_to_dict(aggregate(cart.lines, cart.discount_percentage), app.config.get('CURRENCY_SYMBOL', '₹'))

        if as_json:
            click.echo(json.dumps(result, indent=2, ensure_ascii=False))
            return

        click.echo(click.style(f'{len(cart.lines)} lines, {result["item_count"]} items', bold=True))
        for bucket in result['buckets']:
            click.echo(
                f'  GST {bucket["gst_rate"]}%: taxable {bucket["taxable_amount"]}  '
                f'CGST {bucket["cgst_rate"]}% {bucket["cgst"]}  SGST {bucket["sgst_rate"]}% {bucket["sgst"]}'
            )
        if result['exempted_amount'] != '0.00':
            click.echo(f'  Exempted: {result["exempted_amount"]}')
        click.echo(f'Subtotal:    {result["subtotal"]}')
        click.echo(f'Total GST:   {result["total_gst"]}')
        click.echo(f'Discount:    {result["discount"]} ({result["discount_percentage"]}%)')
        click.echo(f'Round off:   {result["round_off"]}')
        click.echo(click.style(f'Grand total: {result["grand_total"]}', fg='green', bold=True))
