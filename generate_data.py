# generate_data.py
import argparse
import json
import random
from pathlib import Path
from faker import Faker

CATEGORIES = ["men's clothing", "women's clothing", "jewelery", "electronics"]


def generate_seed_items(rows: int, seed=None) -> list:
    """Builds dummy transactions shaped like the upstream seed document."""
    fake = Faker()
    rng = random.Random(seed)  # nosec B311
    if seed is not None:
        fake.seed_instance(seed)

    items = []
    for external_id in range(1, rows + 1):
        items.append({
            "id": external_id,
            "title": fake.catch_phrase(),
            "price": round(rng.uniform(1.0, 1000.0), 2),
            "description": fake.sentence(nb_words=12),
            "category": rng.choice(CATEGORIES),
            "image": fake.image_url(),
            "sold": rng.random() < 0.5,
            "dateOfSale": fake.date_time_between(start_date="-1y", end_date="now").isoformat() + "Z",
        })
    return items


if __name__ == "__main__":
    # Setup argument parser
    parser = argparse.ArgumentParser(description="Generate a dummy product transaction seed file.")
    parser.add_argument("--rows", type=int, default=60, help="Number of transactions to generate")
    parser.add_argument("--output", default="product_transaction.json", help="Where to write the JSON document")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for repeatable output")
    args = parser.parse_args()

    output_file = Path(args.output)
    output_file.write_text(json.dumps(generate_seed_items(args.rows, seed=args.seed), indent=2))
    print(f"Wrote {args.rows} transactions to {output_file}")
    print(f"Seed the API with it by setting SEED_SOURCE_URL={output_file.resolve()}")
