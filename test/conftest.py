"""Shared fixtures: a reference request with a known encoding and signature."""

import json

import pytest
from hexbytes import HexBytes

from suave_ccr.models import Signature
from suave_ccr.request import ConfidentialComputeRequest

PRIVATE_KEY = "0x" + "11" * 32
KETTLE_ADDRESS = "0x7d83e42b214b75bf1f3e57adc3415da573d97bff"
TO_ADDRESS = "0x780675d71ebe3d3ef05fae379063071147dd3aee"
CHAIN_ID = 0x067932
NONCE = 0x22
GAS = 0x0F4240
GAS_PRICE = 0x3B9ACA00

EXPECTED_V = 0
EXPECTED_R = 0x1567C31C4BEBCD1061EDBAF22DD73FD40FF30F9A3BA4525037F23B2DC61E3473
EXPECTED_S = 0x2DCE69262794A499D525C5D58EDDE33E06A5847B4D321D396B743700A2FD71A8

INPUT = HexBytes(
    "0x236eb5a700000000000000000000000000000000000000000000000000000000000000"
    "020000000000000000000000000000000000000000000000000000000000000060000000"
    "00000000000000000000000000000000000000000000000000000000a000000000000000"
    "000000000000000000000000000000000000000000000000010000000000000000000000"
    "00780675d71ebe3d3ef05fae379063071147dd3aee000000000000000000000000000000"
    "0000000000000000000000000000000000"
)

CONFIDENTIAL_INPUTS = HexBytes(
    "0x0000000000000000000000000000000000000000000000000000000000000020000000"
    "00000000000000000000000000000000000000000000000000000001ea7b22747873223a"
    "5b7b2274797065223a22307830222c226e6f6e6365223a22307830222c22746f223a2230"
    "786361313565643939303036623662313036303865323631363137336131356134376638"
    "3933613661222c22676173223a22307835323038222c226761735072696365223a223078"
    "64222c226d61785072696f72697479466565506572476173223a6e756c6c2c226d617846"
    "6565506572476173223a6e756c6c2c2276616c7565223a223078336538222c22696e7075"
    "74223a223078222c2276223a2230786366323838222c2272223a22307863313764616536"
    "383866396262393632376563636439626636393133626661346539643232383139353134"
    "626539323066343435653263666165343366323965222c2273223a223078356333376462"
    "353862633761613364653065356566386134323532613666326534643134626136396663"
    "38323631636333623630633962643236613634626265222c2268617368223a2230786264"
    "326365366265396433346136613239393437323934666265613764346134383464666336"
    "3565643963383931396533626539366131353634363630656265227d5d2c227065726365"
    "6e74223a31302c224d617463684964223a5b302c302c302c302c302c302c302c302c302c"
    "302c302c302c302c302c302c305d7d000000000000000000000000000000000000000000"
    "00"
)

# keccak256 of CONFIDENTIAL_INPUTS as it appears in the encoding below
CONFIDENTIAL_INPUTS_HASH = HexBytes("0x89ee438ca379ac86b0478517d43a6a9e078cf51543acac0facd68aff313e2ff1")

EXPECTED_ENCODING = HexBytes(
    "0x43f903a9f9016322843b9aca00830f424094780675d71ebe3d3ef05fae379063071147"
    "dd3aee80b8c4236eb5a70000000000000000000000000000000000000000000000000000"
    "000000000002000000000000000000000000000000000000000000000000000000000000"
    "006000000000000000000000000000000000000000000000000000000000000000a00000"
    "000000000000000000000000000000000000000000000000000000000001000000000000"
    "000000000000780675d71ebe3d3ef05fae379063071147dd3aee00000000000000000000"
    "00000000000000000000000000000000000000000000947d83e42b214b75bf1f3e57adc3"
    "415da573d97bffa089ee438ca379ac86b0478517d43a6a9e078cf51543acac0facd68aff"
    "313e2ff18306793280a01567c31c4bebcd1061edbaf22dd73fd40ff30f9a3ba4525037f2"
    "3b2dc61e3473a02dce69262794a499d525c5d58edde33e06a5847b4d321d396b743700a2"
    "fd71a8b90240000000000000000000000000000000000000000000000000000000000000"
    "002000000000000000000000000000000000000000000000000000000000000001ea7b22"
    "747873223a5b7b2274797065223a22307830222c226e6f6e6365223a22307830222c2274"
    "6f223a223078636131356564393930303662366231303630386532363136313733613135"
    "61343766383933613661222c22676173223a22307835323038222c226761735072696365"
    "223a22307864222c226d61785072696f72697479466565506572476173223a6e756c6c2c"
    "226d6178466565506572476173223a6e756c6c2c2276616c7565223a223078336538222c"
    "22696e707574223a223078222c2276223a2230786366323838222c2272223a2230786331"
    "376461653638386639626239363237656363643962663639313362666134653964323238"
    "3139353134626539323066343435653263666165343366323965222c2273223a22307835"
    "633337646235386263376161336465306535656638613432353261366632653464313462"
    "613639666338323631636333623630633962643236613634626265222c2268617368223a"
    "223078626432636536626539643334613661323939343732393466626561376434613438"
    "34646663363565643963383931396533626539366131353634363630656265227d5d2c22"
    "70657263656e74223a31302c224d617463684964223a5b302c302c302c302c302c302c30"
    "2c302c302c302c302c302c302c302c302c305d7d00000000000000000000000000000000"
    "000000000000"
)

# Digest fixture: same kettle, different recipient and confidential inputs
DIGEST_TO_ADDRESS = "0x772092ff73c43883a547bea1e1e007ec0d33478e"
DIGEST_NONCE = 0x18
EXPECTED_DIGEST = HexBytes("0x72ffab40c5116931200ca87052360787559871297b3615a8c2ff28be738ac59f")

DIGEST_INPUT = HexBytes(
    "0x236eb5a700000000000000000000000000000000000000000000000000000000000000"
    "020000000000000000000000000000000000000000000000000000000000000060000000"
    "00000000000000000000000000000000000000000000000000000000a000000000000000"
    "000000000000000000000000000000000000000000000000010000000000000000000000"
    "00772092ff73c43883a547bea1e1e007ec0d33478e000000000000000000000000000000"
    "0000000000000000000000000000000000"
)

DIGEST_CONFIDENTIAL_INPUTS = HexBytes(
    "0x0000000000000000000000000000000000000000000000000000000000000020000000"
    "00000000000000000000000000000000000000000000000000000001ea7b22747873223a"
    "5b7b2274797065223a22307830222c226e6f6e6365223a22307830222c22746f223a2230"
    "783862626538633334663739643335353466663162623664393231373361323766666135"
    "6237313233222c22676173223a22307835323038222c226761735072696365223a223078"
    "64222c226d61785072696f72697479466565506572476173223a6e756c6c2c226d617846"
    "6565506572476173223a6e756c6c2c2276616c7565223a223078336538222c22696e7075"
    "74223a223078222c2276223a2230786366323837222c2272223a22307862396433643236"
    "643135633630376237653537353235333761336163326432363330643161653036386163"
    "353138616539393862613439313236323134383135222c2273223a223078356365346664"
    "396135653765333731386566306137313865336334623331353065383730363765333733"
    "61333439323538643962333330353930396332303565222c2268617368223a2230786363"
    "393462663738646336663137396366333137663864383935343839336439373030336633"
    "3266353332623530623865333861626631333939353364643664227d5d2c227065726365"
    "6e74223a31302c224d617463684964223a5b302c302c302c302c302c302c302c302c302c"
    "302c302c302c302c302c302c305d7d000000000000000000000000000000000000000000"
    "00"
)

RESPONSE_TRANSACTION = json.loads(
    '{"blockHash":null,"blockNumber":null,"chainId":"0x1008c45","confidential'
    'ComputeResult":"0x000000000000000000000000000000000000000000000000000000'
    '0001ccb310","from":"0x19e7e376e7c213b7e7e7e46cc70a5dd086daff2a","gas":"0'
    'xf4240","gasPrice":"0x8c9aca00","hash":"0x82f636c7bd91f9895f896b044e3352'
    '8a2d116c65eea4c8e18c30c4577ae20ce2","input":"0x0000000000000000000000000'
    '000000000000000000000000000000001ccb310","nonce":"0x45","r":"0x85242d187'
    '6ce1d6a655fd485346628f3df18a051be0f8efa4bfa40b9e85a3dfe","requestRecord"'
    ':{"chainId":"0x1008c45","confidentialInputsHash":"0xc5d2460186f7233c927e'
    '7db2dcc703c0e500b653ca82273b7bfad8045d85a470","gas":"0xf4240","gasPrice"'
    ':"0x8c9aca00","hash":"0x3d753c496bb9053c7da2cdbbe170614d3e9408ee12ba521c'
    '72c2b21e151b7ab9","input":"0x5072355300000000000000000000000000000000000'
    '000000000000000000000000000200000000000000000000000000000000000000000000'
    '0000000000000000000074554485553445400","kettleAddress":"0x03493869959c86'
    '6713c33669ca118e774a30a0e5","maxFeePerGas":null,"maxPriorityFeePerGas":n'
    'ull,"nonce":"0x45","r":"0xc1c5071f78c6f6b6380ebc4957dd4f6c74bdf5be742ad0'
    'd62d2d75f510e33660","s":"0x5de5c97f9c5ee5c5dad3bb0d591e581f48cd947e998d3'
    '2500bb73de24dd7a6f9","to":"0xc803334c79650708daf3a3462ac4b48296b1352a","'
    'type":"0x42","v":"0x0","value":"0x0"},"s":"0x4f0880f42d42b1de17f97c33749'
    'd60a46bd1f493c6547f08ac2bed0c6d111861","to":"0xc803334c79650708daf3a3462'
    'ac4b48296b1352a","transactionIndex":null,"type":"0x50","v":"0x1","value"'
    ':"0x0"}'
)


@pytest.fixture
def tx_params():
    """web3 transaction parameters for the reference request."""
    return {
        "to": TO_ADDRESS,
        "gas": GAS,
        "gasPrice": GAS_PRICE,
        "chainId": CHAIN_ID,
        "nonce": NONCE,
        "data": INPUT,
    }


@pytest.fixture
def unsigned_request(tx_params):
    """The reference request before signing."""
    return ConfidentialComputeRequest.from_tx_params(
        tx_params, KETTLE_ADDRESS, CONFIDENTIAL_INPUTS
    )


@pytest.fixture
def signed_request(unsigned_request):
    """The reference request carrying the known signature."""
    unsigned_request.record.set_signature(
        Signature(v=EXPECTED_V, r=EXPECTED_R, s=EXPECTED_S)
    )
    return unsigned_request


@pytest.fixture
def digest_request():
    """Request matching the reference signing digest."""
    return ConfidentialComputeRequest.from_tx_params(
        {
            "to": DIGEST_TO_ADDRESS,
            "gas": GAS,
            "gasPrice": GAS_PRICE,
            "chainId": 1,
            "nonce": DIGEST_NONCE,
            "data": DIGEST_INPUT,
        },
        KETTLE_ADDRESS,
        DIGEST_CONFIDENTIAL_INPUTS,
    )
