"""Flask CLI commands for admin operations."""
import click
from flask import current_app


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables (use `flask db upgrade` where migrations run)."""
        from podshop.extensions import db

        db.create_all()
        click.echo("Database initialized.")

    @app.cli.command("submit-design")
    @click.argument("design_id", type=int)
    def submit_design(design_id):
        """Submit a DRAFT design for validation."""
        from podshop.services import design_service

        design = design_service.submit_design_for_validation(design_id)
        click.echo(f"Design {design.id} is now {design.status.value}")

    @app.cli.command("validate-design")
    @click.argument("design_id", type=int)
    @click.option("--approve/--reject", default=True)
    @click.option("--reason", default=None, help="Required when rejecting")
    @click.option("--admin-id", type=int, default=None)
    def validate_design(design_id, approve, reason, admin_id):
        """Approve or reject a PENDING design and cascade to its products."""
        from podshop.services import publication_service

        result = publication_service.apply_design_validation_decision(
            design_id,
            "APPROVE" if approve else "REJECT",
            validator_id=_default_admin(admin_id),
            reason=reason,
        )
        click.echo(f"Design {result.design.id}: {result.design.status.value}")
        _echo_results(result.product_results)
        for warning in result.warnings:
            click.echo(f"WARNING: {warning}", err=True)

    @app.cli.command("design-status")
    @click.argument("design_id", type=int)
    def design_status(design_id):
        """Show a design's validation status."""
        from podshop.services import design_service

        status = design_service.get_design_validation_status(design_id)
        for key, value in status.items():
            click.echo(f"{key}: {value}")

    @app.cli.command("gc-designs")
    @click.option("--max-age-days", type=int, default=None)
    def gc_designs(max_age_days):
        """Soft-delete stale unreferenced DRAFT/REJECTED designs."""
        from podshop.services import design_service

        if max_age_days is None:
            max_age_days = current_app.config["ORPHAN_DESIGN_MAX_AGE_DAYS"]
        collected = design_service.collect_orphan_designs(max_age_days)
        click.echo(f"Collected {len(collected)} orphan designs.")

    @app.cli.command("auto-validate-products")
    @click.option("--design-id", type=int, default=None, help="Only this design")
    @click.option("--admin-id", type=int, default=None)
    def auto_validate_products(design_id, admin_id):
        """Validate products created on already validated designs."""
        from podshop.services import publication_service

        admin_id = _default_admin(admin_id)
        if design_id is not None:
            outcomes = {
                design_id: publication_service.auto_validate_products_for_design(
                    design_id, admin_id
                )
            }
        else:
            outcomes = publication_service.auto_validate_all_eligible_products(admin_id)

        total = 0
        for validated_design_id, results in outcomes.items():
            click.echo(f"Design {validated_design_id}:")
            _echo_results(results)
            total += len(results)
        click.echo(f"Auto-validated {total} products across {len(outcomes)} designs.")


def _default_admin(admin_id):
    if admin_id is not None:
        return admin_id
    admins = current_app.config["ADMIN_IDS"]
    if not admins:
        raise click.UsageError("Pass --admin-id or configure ADMIN_IDS.")
    return admins[0]


def _echo_results(product_results):
    for r in product_results:
        line = f"  product {r.product_id}: {r.outcome}"
        if r.status:
            line += f" ({r.status})"
        if r.error:
            line += f" - {r.error}"
        click.echo(line)
