#!/usr/bin/env python
"""
Quote a travel package from the command line.

Usage:
    python scripts/quote.py 8000 --currency THB --country TH --adults 2
    python scripts/quote.py 11800 --currency INR --country IN --service hotel --inclusive
"""
import argparse
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from travel_pricing.engine.errors import PricingError
from travel_pricing.engine.models import PaxCount
from travel_pricing.services.config_loader import ConfigRepository
from travel_pricing.utils.formatting import format_currency


def main():
    parser = argparse.ArgumentParser(description="Quote a travel package")
    parser.add_argument('base_amount', type=float, help="Supplier cost for the whole booking")
    parser.add_argument('--currency', required=True, help="Quote currency")
    parser.add_argument('--country', default=None, help="Destination country code")
    parser.add_argument('--source-currency', default=None, help="Currency of the supplier cost")
    parser.add_argument('--adults', type=int, default=1)
    parser.add_argument('--children', type=int, default=0)
    parser.add_argument('--infants', type=int, default=0)
    parser.add_argument('--service', default='all', help="Service type for tax lookup")
    parser.add_argument('--inclusive', action='store_true', help="Priced amount already contains tax")
    args = parser.parse_args()

    repository = ConfigRepository()
    pax = PaxCount(adults=args.adults, children=args.children, infants=args.infants)

    try:
        result = repository.quote_service.quote(
            args.base_amount, pax, args.country or repository.settings.default_country,
            args.currency, service_type=args.service, is_inclusive=args.inclusive,
            source_currency=args.source_currency,
        )
    except PricingError as e:
        print(f"❌ {e}")
        sys.exit(1)

    currency = result.pricing.currency
    print("Resolution trace:")
    print(result.pricing.get_trace_text())
    print()
    print(f"Strategy:    {result.pricing.strategy}")
    print(f"Base:        {format_currency(result.pricing.base_price, currency)}")
    print(f"Markup:      {format_currency(result.pricing.markup, currency)}")
    print(f"Subtotal:    {format_currency(result.pricing.final_price, currency)}")
    for item in result.tax.tax_breakdown:
        print(f"  {item.type} {item.rate:g}%: {format_currency(item.amount, currency)}  ({item.description})")
    print(f"Total:       {format_currency(result.grand_total, currency)}")
    print(f"Per person:  {format_currency(result.per_person_total, currency)}")
    if result.tax.tds_amount is not None:
        print(f"TDS:         {format_currency(result.tax.tds_amount, currency)}")
        print(f"Net payable: {format_currency(result.tax.net_payable(), currency)}")


if __name__ == "__main__":
    main()
