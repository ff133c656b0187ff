"""Fixtures for sales modules, media catalogs and training data."""

import pytest
import pytest_asyncio

from salesbot.schemas.conversa import Channel
from salesbot.schemas.module import (
    CommunicationStyleProfile,
    MediaItem,
    MediaMetadata,
    Product,
    ProductInfo,
    ProviderConfig,
    QuestionAnswer,
    SalesFlowStep,
    SalesModule,
    TrainingData,
)


def make_media(item_id, colors=None, **metadata):
    return MediaItem(
        id=item_id,
        url=f"https://cdn.example.com/{item_id}.jpg",
        file_name=f"{item_id}.jpg",
        metadata=MediaMetadata(colors=colors or [], **metadata),
    )


@pytest.fixture(scope="function")
def media_catalog():
    """Blue shirt, red shirt, and a silk shirt with no color."""
    return [
        make_media("media-blue", ["blue"], tags=["áo sơ mi"]),
        make_media("media-red", ["đỏ"], tags=["áo sơ mi"]),
        make_media(
            "media-silk",
            features=["lụa"],
            description="Áo lụa cao cấp, mềm mại",
        ),
    ]


@pytest.fixture(scope="function")
def training_data():
    return TrainingData(
        product_info=ProductInfo(
            name="Áo sơ mi lụa",
            description="Áo sơ mi lụa tơ tằm may thủ công",
            price=450000,
            currency="VND",
            variants=["Xanh", "Đỏ"],
            features=["Lụa tơ tằm", "Chống nhăn"],
        ),
        sales_flow=[
            SalesFlowStep(step=2, name="Tư vấn", description="Tư vấn mẫu phù hợp"),
            SalesFlowStep(
                step=1,
                name="Chào hỏi",
                description="Chào khách thân thiện",
                triggers=["xin chào"],
            ),
        ],
        communication_style=CommunicationStyleProfile(
            tone="friendly", language="vietnamese", use_emojis=True
        ),
        common_questions=[
            QuestionAnswer(question="Có ship COD không?", answer="Dạ có ạ."),
        ],
    )


@pytest.fixture(scope="function")
def sales_module(faker, media_catalog, training_data):
    """An active Messenger module with catalog, media and training data."""
    return SalesModule(
        id=faker.uuid4(),
        name="Shop " + faker.last_name(),
        description=faker.sentence(),
        channel=Channel.MESSENGER,
        channel_id=str(faker.random_number(digits=12, fix_len=True)),
        access_token=faker.sha256(),
        ai_provider=ProviderConfig(api_key="sk-test"),
        products=[
            Product(id="p-1", name="Áo sơ mi lụa", price=450000),
        ],
        media=media_catalog,
        training_data=training_data,
    )


@pytest.fixture(scope="function")
def untrained_module(faker):
    return SalesModule(
        id=faker.uuid4(),
        name="Shop " + faker.last_name(),
        channel=Channel.TELEGRAM,
        channel_id="123456",
        access_token="123456:AAHdqTcvCH1vGWJxfSeofSAs0K5P",
    )


@pytest_asyncio.fixture(scope="function")
async def stored_module(module_store, sales_module):
    await module_store.save(sales_module)
    return sales_module
