"""
Basic usage example for the grocery classifier library.

Requires an OpenAI API key in OPENAI_API_KEY for the unknown products.
"""

import asyncio
import logging

from grocery_classifier import GroceryClassifier
from grocery_classifier.exceptions import ClassificationError, ConfigurationError


async def main():
    """Classify a shopping list, teach a correction and list suggestions."""

    logging.basicConfig(level=logging.INFO)

    print("🛒 Grocery Classifier Basic Usage Example")
    print("=" * 40)

    print("\n1. Creating classifier...")
    try:
        classifier = GroceryClassifier(
            database_url="sqlite:///groceries.db",
            model_name="openai:gpt-4o-mini",
        )
    except ConfigurationError as e:
        print(f"❌ Configuration error: {e}")
        return

    async with classifier:
        print("\n2. Classifying a shopping list...")
        shopping_list = ["piens", "rupjmaize", "Maltā gaļa", "sarkanvīns", "zobu pasta"]
        try:
            response = await classifier.classify_products(shopping_list)
        except ClassificationError as e:
            print(f"❌ Classification failed: {e}")
            return

        for item in response.classifications:
            print(
                f"   {item.product:<15} → {item.category:<12} "
                f"({item.source}, confidence {item.confidence})"
            )
        print(f"   AI used: {response.ai_used}, cached: {response.cached}")

        print("\n3. Repeating the request in another order (served from cache)...")
        response = await classifier.classify_products(list(reversed(shopping_list)))
        print(f"   cached: {response.cached}")

        print("\n4. Teaching a correction...")
        ack = classifier.learn("zobu pasta", "hygiene")
        print(f"   ✅ {ack.message}: {ack.product} → {ack.category}")

        print("\n5. Most used products:")
        for suggestion in classifier.list_suggestions(limit=5):
            print(f"   {suggestion.name} ({suggestion.category}) × {suggestion.usage_count}")

        print("\n6. Store layout:")
        for category in classifier.list_categories():
            print(f"   {category.aisle_order:>4} {category.icon} {category.name}")


if __name__ == "__main__":
    asyncio.run(main())
