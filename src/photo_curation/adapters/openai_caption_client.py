"""OpenAI Responses API client for caption generation."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from photo_curation.services.captions import CaptionClient


@dataclass
class OpenAICaptionClient(CaptionClient):
    """Caption client backed by OpenAI Responses API."""

    client: AsyncOpenAI
    max_output_tokens: int = 100

    @classmethod
    def create(cls, api_key: str) -> "OpenAICaptionClient":
        """Create an OpenAI caption client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def caption(self, *, model: str, image_data_url: str, prompt: str) -> str:
        """Call OpenAI Responses API with the image and caption prompt."""
        response = await self.client.responses.create(
            model=model,
            input=[
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": prompt},
                        {"type": "input_image", "image_url": image_data_url},
                    ],
                }
            ],
            max_output_tokens=self.max_output_tokens,
            store=False,
        )
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty caption")
        return output_text.strip()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
