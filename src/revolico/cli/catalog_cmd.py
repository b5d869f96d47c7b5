"""Catalog commands: list, categories, quote, business add, product add, order submit."""

from __future__ import annotations

import sys

import click
from rich.table import Table

from ._common import REVOLICO_HOME, console, open_context, require_admin
from ..catalog import add_product, register_business, submit_order
from ..listing import categories, list_products, order_quote
from ..models import DeliveryType
from ..session import AdminSession, SessionState

DELIVERY_CHOICES = click.Choice([d.value for d in DeliveryType])


def register_catalog_commands(main: click.Group) -> None:
    """Register catalog, business, product and order command groups."""

    @main.group()
    def catalog():
        """Browse the listings. No login needed."""

    @catalog.command("list")
    @click.option("--home", default=REVOLICO_HOME, type=click.Path())
    @click.option("--search", default="", help="Match name or description.")
    @click.option("--category", default="", help="Only this category.")
    @click.option("--oldest", is_flag=True, help="Oldest publications first.")
    def catalog_list(home, search, category, oldest):
        """List products across all businesses."""
        ctx = open_context(home)
        rows = list_products(ctx.document, search, category, newest_first=not oldest)
        if not rows:
            console.print("\n  [dim]No products found.[/]\n")
            return

        table = Table(title="Revolico GTM")
        table.add_column("ID", style="dim", no_wrap=True)
        table.add_column("Product", style="bold")
        table.add_column("Business", style="cyan")
        table.add_column("Price", justify="right")
        table.add_column("Stock", justify="right")
        table.add_column("Category")
        for row in rows:
            p = row.product
            name = f"{p.name} [yellow](offer)[/]" if p.on_offer else p.name
            table.add_row(
                str(p.id), name,
                f"{row.business_name}\n[dim]{row.business_address} #{row.business_id}[/]",
                f"Q{p.price:.2f}", str(p.stock), p.category,
            )
        console.print(table)

    @catalog.command("categories")
    @click.option("--home", default=REVOLICO_HOME, type=click.Path())
    def catalog_categories(home):
        """List product categories."""
        ctx = open_context(home)
        for name in categories(ctx.document):
            console.print(f"  {name}")

    @catalog.command("quote")
    @click.option("--home", default=REVOLICO_HOME, type=click.Path())
    @click.option("--business", "business_id", type=int, required=True)
    @click.option("--product", "product_ids", type=int, multiple=True, required=True)
    @click.option("--delivery", "delivery_type", type=DELIVERY_CHOICES, default="pickup")
    def catalog_quote(home, business_id, product_ids, delivery_type):
        """Price an order before submitting it."""
        ctx = open_context(home)
        quote = order_quote(ctx.document, business_id, product_ids, DeliveryType(delivery_type))
        if quote is None:
            console.print("[red]Unknown business or product.[/]")
            sys.exit(1)

        console.print(f"\n  Business: [cyan]{quote.business.name}[/]")
        console.print(f"  Products: {', '.join(p.name for p in quote.products)}")
        line = f"  Total: [bold]Q{quote.subtotal:.2f}[/]"
        if quote.delivery_fee > 0:
            line += f" + delivery Q{quote.delivery_fee:.2f} = [bold]Q{quote.total:.2f}[/]"
        console.print(line + "\n")

    @main.group()
    def business():
        """Manage businesses (admin)."""

    @business.command("add")
    @click.option("--home", default=REVOLICO_HOME, type=click.Path())
    @click.option("--name", required=True)
    @click.option("--address", required=True)
    @click.option("--fee", "delivery_fee", type=float, default=0.0, help="Delivery fee.")
    def business_add(home, name, address, delivery_fee):
        """Register a new business."""
        ctx = open_context(home)
        session = require_admin(ctx)
        created, persisted = register_business(ctx, session.gateway, name, address, delivery_fee)
        if not persisted:
            console.print("[bold red]Could not save to the shared document.[/]")
            sys.exit(1)
        console.print(f"\n  [green]Business registered:[/] {created.name} (id {created.id})\n")

    @main.group()
    def product():
        """Manage products (admin)."""

    @product.command("add")
    @click.option("--home", default=REVOLICO_HOME, type=click.Path())
    @click.option("--business", "business_id", type=int, required=True)
    @click.option("--name", required=True)
    @click.option("--price", type=float, required=True)
    @click.option("--stock", type=int, default=0)
    @click.option("--category", default="")
    @click.option("--description", default="")
    @click.option("--offer", is_flag=True, help="Mark as on offer.")
    def product_add(home, business_id, name, price, stock, category, description, offer):
        """Add a product to a business."""
        ctx = open_context(home)
        session = require_admin(ctx)
        try:
            created, persisted = add_product(
                ctx, session.gateway, business_id, name, price,
                stock=stock, category=category, description=description, on_offer=offer,
            )
        except LookupError as exc:
            console.print(f"[red]{exc}[/]")
            sys.exit(1)
        if not persisted:
            console.print("[bold red]Could not save to the shared document.[/]")
            sys.exit(1)
        console.print(f"\n  [green]Product added:[/] {created.name} (id {created.id})\n")

    @main.group()
    def order():
        """Place orders."""

    @order.command("submit")
    @click.option("--home", default=REVOLICO_HOME, type=click.Path())
    @click.option("--business", "business_id", type=int, required=True)
    @click.option("--product", "product_ids", type=int, multiple=True, required=True)
    @click.option("--delivery", "delivery_type", type=DELIVERY_CHOICES, default="pickup")
    @click.option("--address", "delivery_address", default=None, help="For home delivery.")
    @click.option("--email", "contact_email", required=True)
    @click.option("--notes", default="")
    def order_submit(home, business_id, product_ids, delivery_type, delivery_address,
                     contact_email, notes):
        """Submit an order.

        Orders are written with the admin token, so this machine must
        hold an admin session. Without one nothing is saved.
        """
        ctx = open_context(home)
        session = AdminSession(ctx)
        if session.resume() != SessionState.ACTIVE:
            console.print(
                "[bold red]Order not saved:[/] no admin token on this machine. "
                "Ask the admin to run [bold]revolico admin login[/] first."
            )
            sys.exit(1)

        dtype = DeliveryType(delivery_type)
        if dtype == DeliveryType.DELIVERY and not delivery_address:
            console.print("[red]Home delivery needs --address.[/]")
            sys.exit(1)

        try:
            placed, persisted = submit_order(
                ctx, session.gateway, business_id, product_ids,
                delivery_type=dtype, contact_email=contact_email,
                delivery_address=delivery_address, notes=notes,
            )
        except LookupError as exc:
            console.print(f"[red]{exc}[/]")
            sys.exit(1)

        if not persisted:
            console.print("[bold red]Could not save the order.[/]")
            sys.exit(1)
        console.print(f"\n  [green]Order sent![/] id {placed.id}. We will contact you soon.\n")
