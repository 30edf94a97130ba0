"""
Message Builder for Customer-Facing Replies.

This module turns order quotes, recommendation questions and recommendation
results into the Spanish WhatsApp text sent back to the customer. It only
formats; every number it prints was computed by the pricing or
recommendation engines.
"""

from .models import OrderQuote, QuestionPrompt, Recommendation, RecommendationResult


def format_price(amount: int) -> str:
    """Format pesos with dot thousands separators: 19500 -> "$19.500"."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(int(amount)):,}".replace(",", ".")


class MessageBuilder:
    """
    Builds reply text for the ordering and recommendation flows.

    WhatsApp renders *asterisks* as bold, so headings use them.
    """

    CLARIFICATION_MESSAGE = (
        "No encontré esos productos en nuestro menú 🤔 "
        "¿Puedes escribir el nombre como aparece en el menú?"
    )

    def build_order_summary(self, quote: OrderQuote) -> str:
        """Order lines, subtotal, delivery and total; or a clarification request."""
        if quote.needs_clarification:
            return self.CLARIFICATION_MESSAGE

        lines = ["*Tu pedido:*"]
        for line in quote.lines:
            lines.append(f"• {line.quantity}x {line.display_name} - {format_price(line.line_total)}")

        pricing = quote.pricing
        lines.append("")
        lines.append(f"Subtotal: {format_price(pricing.subtotal)}")
        lines.append(f"Domicilio: {format_price(pricing.delivery_fee)}")
        lines.append(f"*Total: {format_price(pricing.total)}*")

        if pricing.below_minimum:
            lines.append("")
            lines.append(self.build_minimum_order_note(pricing.minimum_order, pricing.shortfall))

        return "\n".join(lines)

    def build_minimum_order_note(self, minimum_order: int, shortfall: int) -> str:
        return (
            f"⚠️ El pedido mínimo es {format_price(minimum_order)}. "
            f"Te faltan {format_price(shortfall)} para completarlo."
        )

    def build_question(self, prompt: QuestionPrompt) -> str:
        """Question text with numbered options and a step counter."""
        lines = [f"({prompt.step}/{prompt.total_steps}) {prompt.text}", ""]
        for index, option in enumerate(prompt.options, start=1):
            lines.append(f"{index}. {option}")
        lines.append("")
        lines.append("Responde con el número o escribe tu respuesta.")
        return "\n".join(lines)

    def _describe(self, rec: Recommendation) -> str:
        if rec.quantity > 1:
            return (
                f"{rec.quantity}x {rec.display_name} - {format_price(rec.total_price)} "
                f"({format_price(rec.price)} c/u)"
            )
        return f"{rec.display_name} - {format_price(rec.price)}"

    def build_recommendations(self, result: RecommendationResult) -> str:
        """Primary pick with its reason, then the alternatives."""
        primary = result.primary
        lines = [
            "✨ *Te recomiendo:*",
            self._describe(primary),
            f"_{primary.reason}_",
        ]
        if result.alternatives:
            lines.append("")
            lines.append("*También te pueden gustar:*")
            for rec in result.alternatives:
                lines.append(f"• {self._describe(rec)}")
        lines.append("")
        lines.append("¿Quieres pedir alguna de estas opciones?")
        return "\n".join(lines)

    def build_no_candidates(self) -> str:
        return (
            "No encontré productos que se ajusten a tus preferencias 😕 "
            "¿Quieres intentar con otro presupuesto o ver el menú completo?"
        )
